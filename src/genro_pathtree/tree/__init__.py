# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""PathTree package - path-addressed JSON document.

The package is organized into:
- core: the PathTree class with path traversal, typed access, iteration
  and reload

Example:
    >>> from genro_pathtree import PathTree
    >>> tree = PathTree()
    >>> tree.set('config.name', 'MyApp')
    >>> tree.get_string('config.name')
    'MyApp'
"""

from .core import PathTree

__all__ = ["PathTree"]
