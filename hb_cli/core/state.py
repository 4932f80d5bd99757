"""Runtime state container for CLI context."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from rich.console import Console

from hb_cli.core.classify import DEFAULT_RULES, ClassifierRules
from hb_cli.core.constants import LOW_CONFIDENCE_THRESHOLD


@dataclass
class CLIState:
    """CLI output options, loaded configuration and classifier settings."""

    json_output: bool
    plain_output: bool
    verbose: bool
    quiet: bool
    config_path: Path
    config: Dict[str, Any]
    console: Console
    rules: ClassifierRules = field(default=DEFAULT_RULES)
    low_confidence_threshold: float = LOW_CONFIDENCE_THRESHOLD
