"""Rules porting ASP.NET MVC API usage to ASP.NET Core.

These target Python code that drives .NET through pythonnet or IronPython,
where ASP.NET types are imported and constructed like any Python class::

    import PagedList
    from System.Web.Mvc import HttpStatusCodeResult

    return HttpStatusCodeResult(HttpStatusCode.NotFound)

becomes::

    import PagedList.Core
    from System.Web.Mvc import HttpStatusCodeResult

    return NotFoundResult()
"""
from __future__ import annotations

from rewire.matching.matchers import ConstructorArgumentMatcher, DirectiveNameMatcher
from rewire.rewriting.rewriters import DEFAULT_KEY, ConstructorRewriter, DirectiveRewriter
from rewire.rules.base import MigrationRule, Severity
from rewire.syntax.kinds import NodeKind

HTTP_STATUS_CODE_RESULT_ID = "GCP0001"
PAGED_LIST_ID = "GCP0002"

CATEGORY = "Upgrade"

HTTP_STATUS_CODE_RESULT = "HttpStatusCodeResult"

# HttpStatusCode member -> ASP.NET Core result type
STATUS_CODE_RESULTS = {
    "Conflict": "ConflictResult",
    "NoContent": "NoContentResult",
    "NotFound": "NotFoundResult",
    "OK": "OkResult",
    "Unauthorized": "UnauthorizedResult",
    "UnprocessableEntity": "UnprocessableEntityResult",
    "UnsupportedMediaType": "UnsupportedMediaTypeResult",
    "InternalServerError": "System.Web.Http.InternalServerErrorResult",
    DEFAULT_KEY: "BadRequestResult",
}

PAGED_LIST = "PagedList"
PAGED_LIST_CORE = "PagedList.Core"


HTTP_STATUS_CODE_RESULT_RULE = MigrationRule(
    id=HTTP_STATUS_CODE_RESULT_ID,
    title="ASP.NET HttpStatusCodeResult",
    message="HttpStatusCodeResult {0} is not valid in ASP.NET Core",
    description="Identifies HttpStatusCodeResult(s) that need to be upgraded.",
    kinds=frozenset({NodeKind.OBJECT_CREATION}),
    matcher=ConstructorArgumentMatcher(HTTP_STATUS_CODE_RESULT),
    rewriter=ConstructorRewriter(HTTP_STATUS_CODE_RESULT, STATUS_CODE_RESULTS),
    category=CATEGORY,
    severity=Severity.WARNING,
)

PAGED_LIST_RULE = MigrationRule(
    id=PAGED_LIST_ID,
    title="ASP.NET Core should use PagedList.Core",
    message="PagedList {0} is not valid in ASP.NET Core",
    description="Identifies PagedList instead of PagedList.Core.",
    kinds=frozenset({NodeKind.DIRECTIVE}),
    matcher=DirectiveNameMatcher(PAGED_LIST),
    rewriter=DirectiveRewriter(PAGED_LIST, PAGED_LIST_CORE),
    category=CATEGORY,
    severity=Severity.WARNING,
)
