"""Care template storage."""

from __future__ import annotations

import json
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from hb_cli.core.constants import CATEGORIES, DEFAULT_TEMPLATES
from hb_cli.core.models import CareTemplate


class TemplateError(RuntimeError):
    """Raised for invalid template data or unknown ids."""


def _validate(name: str, category: str, frequency: str) -> None:
    if not name.strip() or not frequency.strip():
        raise TemplateError("Missing information: name and frequency are required.")
    if category not in CATEGORIES:
        raise TemplateError(f"Unknown category {category!r}; expected one of: {', '.join(CATEGORIES)}")


def _from_dict(payload: Dict[str, Any]) -> CareTemplate:
    return CareTemplate(
        id=str(payload["id"]),
        name=str(payload.get("name") or ""),
        category=str(payload.get("category") or "exercise"),
        frequency=str(payload.get("frequency") or ""),
        active=bool(payload.get("active", False)),
    )


class TemplateStore:
    """Templates persisted as a JSON list; seeded with defaults on first use."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def list(self) -> List[CareTemplate]:
        if not self.path.exists():
            return [_from_dict(item) for item in DEFAULT_TEMPLATES]
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as exc:
            raise TemplateError(f"Invalid template file {self.path}: {exc}") from exc
        if not isinstance(data, list):
            raise TemplateError(f"Template file {self.path} must contain a list")
        return [_from_dict(item) for item in data if isinstance(item, dict) and item.get("id")]

    def _write(self, templates: List[CareTemplate]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [template.to_dict() for template in templates]
        self.path.write_text(json.dumps(payload, indent=2) + "\n")

    def get(self, template_id: str) -> CareTemplate:
        for template in self.list():
            if template.id == template_id:
                return template
        raise TemplateError(f"Template not found: {template_id}")

    def add(self, name: str, category: str, frequency: str, active: bool = True) -> CareTemplate:
        _validate(name, category, frequency)
        template = CareTemplate(
            id=f"template-{uuid.uuid4().hex[:12]}",
            name=name.strip(),
            category=category,
            frequency=frequency.strip(),
            active=active,
        )
        self._write(self.list() + [template])
        return template

    def update(
        self,
        template_id: str,
        name: Optional[str] = None,
        category: Optional[str] = None,
        frequency: Optional[str] = None,
        active: Optional[bool] = None,
    ) -> CareTemplate:
        templates = self.list()
        for index, current in enumerate(templates):
            if current.id != template_id:
                continue
            updated = CareTemplate(
                id=current.id,
                name=(name if name is not None else current.name).strip(),
                category=category if category is not None else current.category,
                frequency=(frequency if frequency is not None else current.frequency).strip(),
                active=active if active is not None else current.active,
            )
            _validate(updated.name, updated.category, updated.frequency)
            templates[index] = updated
            self._write(templates)
            return updated
        raise TemplateError(f"Template not found: {template_id}")

    def delete(self, template_id: str) -> CareTemplate:
        templates = self.list()
        remaining = [template for template in templates if template.id != template_id]
        if len(remaining) == len(templates):
            raise TemplateError(f"Template not found: {template_id}")
        self._write(remaining)
        return next(template for template in templates if template.id == template_id)

    def toggle(self, template_id: str) -> CareTemplate:
        current = self.get(template_id)
        return self.update(template_id, active=not current.active)
