from .dream_analyzer import DreamAnalyzer
from .illustrator import DreamIllustrator
from .oracle import Oracle, OracleSession

__all__ = ['DreamAnalyzer', 'DreamIllustrator', 'Oracle', 'OracleSession']
