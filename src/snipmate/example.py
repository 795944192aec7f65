"""Example snippet document."""

import logging

from .core.ports import DocumentStore

logger = logging.getLogger("snipmate.example")

EXAMPLE_DOCUMENT = """---
---

# SnipMate Global Snippets

This file contains Python snippets that will be available globally to your
scripts through the `snipmate` registry.

## Math Utilities

```snipmate
# Calculate sum of a list
def total(values):
    return sum(values, 0)
```

## Example Usage

```python
from snipmate.core.registry import default_registry

numbers = [1, 2, 3, 4, 5]
print(f"Sum: {default_registry().total(numbers)}")
```
"""


async def create_example_document(store: DocumentStore, path: str) -> tuple[bool, str]:
    """
    Create the example snippet document at ``path`` unless it exists.

    Returns (created, message).
    """
    if store.exists(path):
        return False, f"{path} already exists."
    try:
        await store.create(path, EXAMPLE_DOCUMENT)
    except (OSError, ValueError) as e:
        logger.error("Error creating example file %s: %s", path, e)
        return False, f"Error creating {path}"
    return True, f"Created {path}"
