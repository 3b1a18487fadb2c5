# pos_ledger/resources/__init__.py
from importlib import resources as importlib_resources
import logging

from jinja2 import Template

_log = logging.getLogger(__name__)

_TEMPLATES_PKG = "pos_ledger.resources.templates"


def load_template(name: str) -> Template:
    """Load a bundled jinja2 template; .html templates are autoescaped."""
    try:
        tpl_str = importlib_resources.files(_TEMPLATES_PKG).joinpath(name).read_text(encoding="utf-8")
    except (FileNotFoundError, OSError, ModuleNotFoundError) as e:
        _log.error("Failed to load template %s: %s", name, e, exc_info=True)
        raise
    return Template(tpl_str, autoescape=name.endswith(".html"))
