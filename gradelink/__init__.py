"""
Gradelink: LTI 1.1 outcome reporting with composable result data extensions.

Copyright (c) 2025 Chronos Algorithmic Observatory
Licensed under MIT License
"""

__version__ = "1.0.0"
__author__ = "Chronos Algorithmic Observatory"
__description__ = "LTI outcome reporting with result data extensions"
