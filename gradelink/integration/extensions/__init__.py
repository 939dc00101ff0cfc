"""
Optional capabilities layered onto the base outcome request.

Copyright (c) 2025 Chronos Algorithmic Observatory
Licensed under MIT License
"""
