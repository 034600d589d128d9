from .ads import AdsRepository
from .results import ResultsRepository
from .analysis_status import AnalysisStatusRepository

__all__ = ["AdsRepository", "ResultsRepository", "AnalysisStatusRepository"]
