"""Core data models for NewTox."""

from enum import Enum
from typing import List, Optional, Set

from pydantic import BaseModel, Field


class InjectionMode(str, Enum):
    OVERLAY = "overlay"
    REPLACEMENT = "replacement"


class ElementRef(BaseModel):
    """Weak handle to a page element, re-resolved by CSS path before every use."""

    selector: str
    tag: Optional[str] = None
    text: Optional[str] = None


class Candidate(BaseModel):
    id: int
    original: str
    context: str = ""
    source: str = ""
    element: Optional[ElementRef] = None
    priority: int = 0


class Rewrite(BaseModel):
    id: Optional[int] = None
    original: str
    alternative: str


class InjectionPair(BaseModel):
    original: str
    alternative: str
    element: ElementRef


class RewriteRequest(BaseModel):
    titles: List[str] = Field(default_factory=list)
    context: Optional[str] = None


class RewriteOutcome(BaseModel):
    rewrites: List[Rewrite] = Field(default_factory=list)
    warning: Optional[str] = None
    source: str = "fallback"


class TitleSummary(BaseModel):
    id: int
    original: str
    source: str = ""
    context: str = ""


class AnalyzeResult(BaseModel):
    titles: List[TitleSummary] = Field(default_factory=list)
    retried: bool = False

    @classmethod
    def from_candidates(cls, candidates: List[Candidate], retried: bool = False) -> "AnalyzeResult":
        titles = [
            TitleSummary(id=item.id, original=item.original, source=item.source, context=item.context)
            for item in candidates
        ]
        return cls(titles=titles, retried=retried)


class ApplyResult(BaseModel):
    status: str = "injected"
    count: int = 0
    requested: int = 0
    mode: InjectionMode = InjectionMode.OVERLAY


class GameState(BaseModel):
    score: float = 0.0
    correct_count: int = 0
    attempts: int = 0
    active_rewrites: List[Rewrite] = Field(default_factory=list)
    revealed: Set[int] = Field(default_factory=set)


class GuessResult(BaseModel):
    index: int
    score: int
    correct: bool
    original: str
