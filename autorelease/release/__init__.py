"""Release flow: locate the merged release PR, extract notes, publish.

- changelog: pure section extraction over changelog markdown
- locator: merged release PR lookup and version parsing
- package_name: manifest-based package name lookup
- publisher: orchestration of the forge calls
"""

from __future__ import annotations
