from .agent import CareerAnalysisAgent
from .schemas import AnalysisResult

__all__ = ["AnalysisResult", "CareerAnalysisAgent"]
