# Configuration file for the Sphinx documentation builder.
#
# For the full list of built-in configuration values, see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html

# -- Project information -----------------------------------------------------
# https://www.sphinx-doc.org/en/master/usage/configuration.html#project-information

import os
import sys
import tomllib
from pathlib import Path

sys.path.insert(0, os.path.abspath(".."))

project = "eltwise"
copyright = "2025, eltwise developers"
author = "eltwise developers"

# Version comes from [tool.poetry] in pyproject.toml
_pyproject_path = Path(__file__).resolve().parent.parent / "pyproject.toml"
with _pyproject_path.open("rb") as f:
    _pyproject = tomllib.load(f)

release = _pyproject["tool"]["poetry"]["version"]
version = release

# -- General configuration ---------------------------------------------------
# https://www.sphinx-doc.org/en/master/usage/configuration.html#general-configuration

extensions = [
    "sphinx.ext.napoleon",  # NumPy-style docstrings
    "sphinx.ext.autodoc",
    "sphinx.ext.viewcode",
    "myst_parser",  # index.md
]
source_suffix = {
    ".rst": "restructuredtext",
    ".md": "markdown",
}

exclude_patterns = [
    "_build",
    "Thumbs.db",
    ".DS_Store",
]

# Docs builds import eltwise without the jax stack installed
autodoc_mock_imports = [
    "jax",
    "jaxlib",
    "numpy",
]

# -- Options for HTML output -------------------------------------------------
# https://www.sphinx-doc.org/en/master/usage/configuration.html#options-for-html-output

html_theme = "sphinx_rtd_theme"
