from .resolver import (
    TEMPLATE_FUNCTIONS,
    TemplateContext,
    build_target_url,
    render,
    render_inputs,
)

__all__ = [
    "TEMPLATE_FUNCTIONS",
    "TemplateContext",
    "build_target_url",
    "render",
    "render_inputs",
]
