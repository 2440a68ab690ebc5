"""Per-type rendering of field definitions and parsing of input events.

Every member of :class:`~formdesk.taxonomy.FieldType` has exactly one handler
in ``HANDLERS``; a type string outside the taxonomy renders a placeholder
instead of raising.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, NamedTuple, Sequence

from markupsafe import Markup

from formdesk.taxonomy import FieldType, coerce_field_type

UNKNOWN_TYPE_TEXT = "Unknown field type"
SELECT_PROMPT = "Select an option"

OnChange = Callable[[str, Any], None]


class FieldEvent(NamedTuple):
    """A raw input event: the control's value and, for checkboxes, its state."""

    value: Any
    checked: bool | None = None


def _flag(name: str, enabled: bool) -> Markup:
    return Markup(f" {name}") if enabled else Markup("")


def _css_class(error: str | None) -> str:
    return "field-input has-error" if error else "field-input"


def _options(field: Mapping[str, Any]) -> list[str]:
    return [str(option) for option in field.get("options") or []]


class FieldHandler:
    input_type = "text"

    def render(
        self, field: Mapping[str, Any], value: Any, disabled: bool, error: str | None
    ) -> Markup:
        return Markup(
            '<input type="{}" id="{}" name="{}" class="{}" value="{}" placeholder="{}"{}{}>'
        ).format(
            self.input_type,
            field["id"],
            field["id"],
            _css_class(error),
            "" if value is None else value,
            field.get("placeholder") or "",
            _flag("required", bool(field.get("required"))),
            _flag("disabled", disabled),
        )

    def parse(self, field: Mapping[str, Any], event: FieldEvent, current: Any) -> Any:
        return "" if event.value is None else str(event.value)

    def from_form(self, field: Mapping[str, Any], form_data: Any) -> Any:
        raw = form_data.get(field["id"])
        return "" if raw is None else str(raw)


class TextHandler(FieldHandler):
    input_type = "text"


class EmailHandler(FieldHandler):
    input_type = "email"


class NumberHandler(FieldHandler):
    # Kept as text; numeric checks belong to validation.
    input_type = "number"


class UrlHandler(FieldHandler):
    input_type = "url"


class DateHandler(FieldHandler):
    input_type = "date"


class TextareaHandler(FieldHandler):
    def render(
        self, field: Mapping[str, Any], value: Any, disabled: bool, error: str | None
    ) -> Markup:
        return Markup(
            '<textarea id="{}" name="{}" class="{}" rows="3" placeholder="{}"{}{}>{}</textarea>'
        ).format(
            field["id"],
            field["id"],
            _css_class(error),
            field.get("placeholder") or "",
            _flag("required", bool(field.get("required"))),
            _flag("disabled", disabled),
            "" if value is None else value,
        )


class SelectHandler(FieldHandler):
    def render(
        self, field: Mapping[str, Any], value: Any, disabled: bool, error: str | None
    ) -> Markup:
        current = "" if value is None else str(value)
        choices = [
            Markup('<option value=""{}>{}</option>').format(
                _flag("selected", current == ""), SELECT_PROMPT
            )
        ]
        for option in _options(field):
            choices.append(
                Markup('<option value="{}"{}>{}</option>').format(
                    option, _flag("selected", option == current), option
                )
            )
        return Markup('<select id="{}" name="{}" class="{}"{}>{}</select>').format(
            field["id"],
            field["id"],
            _css_class(error),
            _flag("disabled", disabled),
            Markup("").join(choices),
        )


class RadioHandler(FieldHandler):
    def render(
        self, field: Mapping[str, Any], value: Any, disabled: bool, error: str | None
    ) -> Markup:
        items = [
            Markup(
                '<label class="choice"><input type="radio" name="{}" value="{}"{}{}>'
                " <span>{}</span></label>"
            ).format(
                field["id"],
                option,
                _flag("checked", value == option),
                _flag("disabled", disabled),
                option,
            )
            for option in _options(field)
        ]
        return Markup('<div id="{}" class="choice-group">{}</div>').format(
            field["id"], Markup("").join(items)
        )


class CheckboxHandler(FieldHandler):
    def render(
        self, field: Mapping[str, Any], value: Any, disabled: bool, error: str | None
    ) -> Markup:
        selected = value if isinstance(value, list) else []
        items = [
            Markup(
                '<label class="choice"><input type="checkbox" name="{}" value="{}"{}{}>'
                " <span>{}</span></label>"
            ).format(
                field["id"],
                option,
                _flag("checked", option in selected),
                _flag("disabled", disabled),
                option,
            )
            for option in _options(field)
        ]
        return Markup('<div id="{}" class="choice-group">{}</div>').format(
            field["id"], Markup("").join(items)
        )

    def parse(self, field: Mapping[str, Any], event: FieldEvent, current: Any) -> Any:
        selected = list(current) if isinstance(current, list) else []
        option = str(event.value)
        if event.checked:
            if option not in selected:
                selected.append(option)
        else:
            selected = [item for item in selected if item != option]
        return selected

    def from_form(self, field: Mapping[str, Any], form_data: Any) -> Any:
        if hasattr(form_data, "getlist"):
            raw = form_data.getlist(field["id"])
        else:
            raw = form_data.get(field["id"]) or []
            if not isinstance(raw, list):
                raw = [raw]
        return [str(item) for item in raw if item not in (None, "")]


class FileHandler(FieldHandler):
    def render(
        self, field: Mapping[str, Any], value: Any, disabled: bool, error: str | None
    ) -> Markup:
        return Markup('<input type="file" id="{}" name="{}" class="{}"{}>').format(
            field["id"], field["id"], _css_class(error), _flag("disabled", disabled)
        )

    def parse(self, field: Mapping[str, Any], event: FieldEvent, current: Any) -> Any:
        return event.value or None

    def from_form(self, field: Mapping[str, Any], form_data: Any) -> Any:
        upload = form_data.get(field["id"])
        filename = getattr(upload, "filename", None)
        if filename:
            return filename
        if isinstance(upload, str) and upload:
            return upload
        return None


class UnknownHandler(FieldHandler):
    def render(
        self, field: Mapping[str, Any], value: Any, disabled: bool, error: str | None
    ) -> Markup:
        return Markup('<div class="field-unknown">{}</div>').format(UNKNOWN_TYPE_TEXT)

    def parse(self, field: Mapping[str, Any], event: FieldEvent, current: Any) -> Any:
        return event.value

    def from_form(self, field: Mapping[str, Any], form_data: Any) -> Any:
        return form_data.get(field["id"])


HANDLERS: dict[FieldType, FieldHandler] = {
    FieldType.TEXT: TextHandler(),
    FieldType.EMAIL: EmailHandler(),
    FieldType.NUMBER: NumberHandler(),
    FieldType.TEXTAREA: TextareaHandler(),
    FieldType.SELECT: SelectHandler(),
    FieldType.CHECKBOX: CheckboxHandler(),
    FieldType.RADIO: RadioHandler(),
    FieldType.DATE: DateHandler(),
    FieldType.FILE: FileHandler(),
    FieldType.URL: UrlHandler(),
}
UNKNOWN_HANDLER = UnknownHandler()

_missing = set(FieldType) - set(HANDLERS)
if _missing:
    raise RuntimeError(f"No field handler for: {sorted(m.value for m in _missing)}")


def handler_for(field: Mapping[str, Any]) -> FieldHandler:
    field_type = coerce_field_type(field.get("type"))
    if field_type is None:
        return UNKNOWN_HANDLER
    return HANDLERS[field_type]


class RenderedField:
    """Markup for one field plus the hook that feeds input events back."""

    def __init__(
        self,
        field: Mapping[str, Any],
        value: Any,
        markup: Markup,
        on_change: OnChange | None,
    ) -> None:
        self.field = field
        self.value = value
        self.markup = markup
        self._on_change = on_change

    def handle(self, event: FieldEvent) -> Any:
        new_value = parse_event(self.field, event, self.value)
        self.value = new_value
        if self._on_change is not None:
            self._on_change(self.field["id"], new_value)
        return new_value

    def __html__(self) -> str:
        return str(self.markup)

    def __str__(self) -> str:
        return str(self.markup)


def render_field(
    field: Mapping[str, Any],
    value: Any = None,
    on_change: OnChange | None = None,
    disabled: bool = False,
    error: str | None = None,
) -> RenderedField:
    markup = handler_for(field).render(field, value, disabled, error)
    return RenderedField(field, value, markup, on_change)


def parse_event(field: Mapping[str, Any], event: FieldEvent, current: Any = None) -> Any:
    return handler_for(field).parse(field, event, current)


def collect_values(fields: Sequence[Mapping[str, Any]], form_data: Any) -> dict[str, Any]:
    """Read one value per field out of a submitted HTML form."""
    return {field["id"]: handler_for(field).from_form(field, form_data) for field in fields}
