import os
import sys

# Import ivsim from the source tree
sys.path.insert(0, os.path.abspath(".."))

project   = "ivsim"
author    = "ivsim contributors"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "sphinx_autodoc_typehints",
    "sphinx_copybutton",
]

html_theme = "sphinx_rtd_theme"

autodoc_member_order    = "bysource"
autodoc_typehints       = "description"

# numpy-style "Parameters" sections
napoleon_use_param  = True
napoleon_use_rtype  = False
