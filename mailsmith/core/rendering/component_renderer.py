"""
Component Renderer
==================

Render email components (Jinja2 templates built from the MJML component
library) into raw markup strings.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import jinja2
from markupsafe import Markup, escape
from pydantic import ValidationError as PropsValidationError

from mailsmith.config.logging import get_logger
from mailsmith.config.settings import get_settings
from mailsmith.core.errors import MailsmithError, RenderError
from mailsmith.core.theme.merger import component_tag, resolve_head, to_kebab_case
from mailsmith.models.schemas import EmailComponent

logger = get_logger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"


def mj_attributes(attributes: Optional[Mapping[str, Any]]) -> Markup:
    """Render a mapping as MJML attributes (`` key="value" ...``)."""
    if not attributes:
        return Markup("")

    pairs: List[str] = []
    for key, value in attributes.items():
        if value is None or value is False:
            continue
        pairs.append(f'{to_kebab_case(str(key))}="{escape(str(value))}"')

    return Markup(" " + " ".join(pairs)) if pairs else Markup("")


class BaseComponentRenderer(ABC):
    """Abstract base class for component renderers."""

    @abstractmethod
    def render(self, component: EmailComponent, props: Mapping[str, Any]) -> str:
        """Render a component with props to a raw markup string."""
        pass

    def __call__(self, component: EmailComponent, props: Mapping[str, Any]) -> str:
        return self.render(component, props)


class Jinja2ComponentRenderer(BaseComponentRenderer):
    """Jinja2-based component renderer implementation."""

    def __init__(self, template_dirs: Optional[Sequence[Path]] = None) -> None:
        self.settings = get_settings()
        self.logger: Any = logger.bind(renderer="jinja2")
        dirs = list(template_dirs) if template_dirs is not None else list(self.settings.template_dirs)
        self._setup_jinja2_environment(dirs)

    def _setup_jinja2_environment(self, template_dirs: List[Path]) -> None:
        """Setup Jinja2 template environment."""
        search_path = [str(path) for path in template_dirs] + [str(TEMPLATE_DIR)]
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(search_path),
            autoescape=jinja2.select_autoescape(
                ["html", "xml", "mjml", "j2"], default_for_string=True
            ),
            undefined=jinja2.StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )

        self._register_template_functions()

    def _register_template_functions(self) -> None:
        """Register component library filters and globals."""
        self.env.filters["mj_attrs"] = mj_attributes
        self.env.filters["mj_tag"] = component_tag
        self.env.globals["resolve_head"] = resolve_head

    def render(self, component: EmailComponent, props: Mapping[str, Any]) -> str:
        """
        Render a component to raw markup.

        Args:
            component: Component descriptor
            props: Component properties

        Returns:
            Rendered markup

        Raises:
            RenderError: If props are invalid, the template fails or renders nothing
        """
        context = self._prepare_context(component, props)

        try:
            if component.source is not None:
                template = self.env.from_string(component.source)
            else:
                template = self.env.get_template(component.template_name)  # type: ignore[arg-type]
            body = template.render(**context)
        except MailsmithError:
            raise
        except jinja2.TemplateError as e:
            self.logger.error("Component rendering failed", component=component.name, error=str(e))
            raise RenderError(f"Component {component.name} failed to render: {e}", e)

        if not body or not body.strip():
            raise RenderError("Component rendered empty body")

        self.logger.debug("Component rendered", component=component.name, length=len(body))
        return body

    def _prepare_context(self, component: EmailComponent, props: Mapping[str, Any]) -> Dict[str, Any]:
        """Validate props against the component's declared model."""
        if component.props_model is None:
            return dict(props)

        try:
            validated = component.props_model.model_validate(dict(props))
        except PropsValidationError as e:
            raise RenderError(f"Invalid props for {component.name}: {e}", e)

        return dict(validated)


def render_component(
    component: EmailComponent,
    props: Optional[Mapping[str, Any]] = None,
    renderer: Optional[BaseComponentRenderer] = None,
) -> str:
    """
    Render a component to its raw markup.

    Args:
        component: Component descriptor
        props: Component properties
        renderer: Renderer override, defaults to ``Jinja2ComponentRenderer``

    Returns:
        Raw rendered markup
    """
    renderer = renderer or Jinja2ComponentRenderer()
    return renderer.render(component, props or {})
