"""Sphinx configuration for the dropctl documentation."""

import importlib.metadata

project = "dropctl"
author = "dropctl contributors"
copyright = "2026, dropctl contributors"

try:
    release = importlib.metadata.version("dropctl")
except importlib.metadata.PackageNotFoundError:
    # Building from a checkout that was never installed
    release = "0.0.0"
version = ".".join(release.split(".")[:2])

extensions = [
    "myst_parser",
    "sphinx_copybutton",
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "sphinx.ext.intersphinx",
]

# Pages are Markdown only; API sections embed reST via eval-rst fences
source_suffix = {".md": "markdown"}
root_doc = "index"
exclude_patterns = ["_build"]

# -- API docs ----------------------------------------------------------------

autodoc_default_options = {
    "members": True,
    "member-order": "bysource",
    "exclude-members": "model_config, model_fields, model_computed_fields",
}
autodoc_typehints = "signature"
autodoc_class_signature = "separated"
napoleon_numpy_docstring = False
napoleon_use_rtype = False

intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "httpx": ("https://www.python-httpx.org/", None),
    "pydantic": ("https://docs.pydantic.dev/latest/", None),
    "rich": ("https://rich.readthedocs.io/en/stable/", None),
}
intersphinx_timeout = 10

# -- Markdown ----------------------------------------------------------------

myst_enable_extensions = ["colon_fence", "fieldlist"]
myst_heading_anchors = 2

# -- HTML --------------------------------------------------------------------

html_theme = "furo"
html_title = "dropctl"
html_theme_options = {
    "sidebar_hide_name": False,
    "top_of_page_buttons": [],
}

# Shell snippets in the docs use a "$ " prompt
copybutton_prompt_text = "$ "
copybutton_only_copy_prompt_lines = True
