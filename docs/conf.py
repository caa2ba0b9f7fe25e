"""Sphinx configuration for Media Tracker API documentation."""

import os
import sys
from datetime import datetime

sys.path.insert(0, os.path.abspath(".."))

project = "Media Tracker API"
current_year = datetime.now().year
copyright = f"{current_year}, Media Tracker"
author = "Media Tracker Team"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
]
