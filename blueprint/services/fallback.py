"""
Ordered-candidate fallback.

Runs labelled candidates one at a time and returns the first acceptable
result. Used for the Nitter instance walk, the Gemini model matrix and the
JSON repair of model output.
"""
import inspect
from typing import Any, Callable, Generic, List, Sequence, Tuple, Type, TypeVar

from blueprint.services.logger import logger

T = TypeVar("T")

Candidate = Tuple[str, Callable[[], Any]]


class CandidatesExhausted(Exception):
    def __init__(self, failures: List[str]):
        super().__init__(f"All {len(failures)} candidates failed")
        self.failures = failures

    def last(self, n: int = 3) -> List[str]:
        return self.failures[-n:]


class CandidateChain(Generic[T]):
    """
    fatal: exception types re-raised at once, skipping the remaining candidates.
    skip: exception types recorded as a failure before moving on.
    accept: predicate a result must pass; a rejected result counts as a failure.
    Anything else propagates untouched.
    """

    def __init__(
        self,
        candidates: Sequence[Candidate],
        *,
        fatal: Tuple[Type[BaseException], ...] = (),
        skip: Tuple[Type[BaseException], ...] = (Exception,),
        accept: Callable[[T], bool] = lambda result: result is not None,
        name: str = "candidate",
    ):
        self.candidates = list(candidates)
        self.fatal = fatal
        self.skip = skip
        self.accept = accept
        self.name = name
        self.failures: List[str] = []

    def _failed(self, label: str, reason: str):
        logger.debug(f"[{self.name}] {label} failed: {reason}")
        self.failures.append(f"{label}: {reason}")

    def _settle(self, label: str, result: T) -> bool:
        if self.accept(result):
            logger.debug(f"[{self.name}] {label} succeeded")
            return True
        self._failed(label, "result rejected")
        return False

    def run(self) -> T:
        self.failures = []
        for label, call in self.candidates:
            try:
                result = call()
            except self.fatal:
                raise
            except self.skip as e:
                self._failed(label, str(e) or type(e).__name__)
                continue
            if self._settle(label, result):
                return result
        raise CandidatesExhausted(self.failures)

    async def arun(self) -> T:
        self.failures = []
        for label, call in self.candidates:
            try:
                result = call()
                if inspect.isawaitable(result):
                    result = await result
            except self.fatal:
                raise
            except self.skip as e:
                self._failed(label, str(e) or type(e).__name__)
                continue
            if self._settle(label, result):
                return result
        raise CandidatesExhausted(self.failures)
