"""Release automation for the browser extension.

- version: semantic version model and release branch/tag names
- machine: release lifecycle stages and legal transitions
- branching / tagging / pull_request: one flow per pipeline step
- adapters / bitbucket: git and pull request capabilities the flows consume
- manifest / update_xml / packaging: artifacts on disk
"""

from __future__ import annotations
