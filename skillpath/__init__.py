"""
SkillPath - Gamified lesson progression with a transactional reward ledger.

Subpackages:
- schemas: Pydantic models for the content tree, questions and ledger records
- classroom: Runtime components (stores, unlock engine, ledger, lesson player)
- utils: Identifier helpers
"""

__version__ = "0.1.0"
