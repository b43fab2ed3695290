from typing import Any, List, Optional

from pydantic import BaseModel, Field


class CheckResult(BaseModel):
    """
    Data model for a single passed smoke check.
    """

    name: str
    detail: Any = None
    elapsed: float = 0.0


class TestOutcome(BaseModel):
    """
    Aggregated result of one harness run.
    """

    # Keep pytest from collecting this as a test class
    __test__ = False

    success: bool
    error: Optional[str] = None
    checks: List[CheckResult] = Field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    @classmethod
    def passed(cls, checks: List[CheckResult]) -> "TestOutcome":
        return cls(success=True, checks=checks)

    @classmethod
    def failed(cls, error: BaseException, checks: List[CheckResult]) -> "TestOutcome":
        return cls(success=False, error=str(error) or repr(error), checks=checks)
