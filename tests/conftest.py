"""
Shared pytest fixtures for the rewire test suite.

This module provides:
- Sample source fixtures with obsolete ASP.NET API usage
- Parsed Document fixtures
- The built-in rule registry and engine components

Fixture Naming Convention:
- sample_* : Fixtures that provide sample source strings
- *_document : Fixtures that provide parsed Documents
"""
from __future__ import annotations

import textwrap

import pytest

from rewire import Document, FixApplier, RuleRegistry, Walker, default_registry


# =============================================================================
# Sample Source Fixtures
# =============================================================================

@pytest.fixture
def sample_controller_code() -> str:
    """
    A controller module using both obsolete APIs.

    Contains:
    - A PagedList import with irregular spacing and a trailing comment
    - Unrelated imports that must not match
    - HttpStatusCodeResult constructions with a known status, a
      fully-qualified replacement, and an unknown status
    """
    return textwrap.dedent("""\
        import    PagedList  # paging
        from System.Net import HttpStatusCode
        from System.Web.Mvc import HttpStatusCodeResult


        def missing(request):
            return HttpStatusCodeResult(HttpStatusCode.NotFound)


        def broken(request):
            return mvc.HttpStatusCodeResult(HttpStatusCode.InternalServerError)


        def teapot(request):
            return HttpStatusCodeResult(HttpStatusCode.Teapot)
    """)


@pytest.fixture
def migrated_controller_code() -> str:
    """sample_controller_code after every fix has been applied."""
    return textwrap.dedent("""\
        import    PagedList.Core  # paging
        from System.Net import HttpStatusCode
        from System.Web.Mvc import HttpStatusCodeResult


        def missing(request):
            return NotFoundResult()


        def broken(request):
            return System.Web.Http.InternalServerErrorResult()


        def teapot(request):
            return BadRequestResult()
    """)


@pytest.fixture
def sample_clean_code() -> str:
    """Source with nothing to migrate, including near misses."""
    return textwrap.dedent("""\
        import MyPagedList
        import PagedList.Extended
        from .PagedList import helpers


        def view(httpStatusCodeResult):
            return httpStatusCodeResult(HttpStatusCode.OK)
    """)


# =============================================================================
# Document Fixtures
# =============================================================================

@pytest.fixture
def controller_document(sample_controller_code: str) -> Document:
    return Document.from_source(sample_controller_code, "controllers.py")


@pytest.fixture
def clean_document(sample_clean_code: str) -> Document:
    return Document.from_source(sample_clean_code, "clean.py")


# =============================================================================
# Engine Component Fixtures
# =============================================================================

@pytest.fixture
def registry() -> RuleRegistry:
    return default_registry()


@pytest.fixture
def walker(registry: RuleRegistry) -> Walker:
    return Walker(registry)


@pytest.fixture
def fixer(registry: RuleRegistry) -> FixApplier:
    return FixApplier(registry)

