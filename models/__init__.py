# Import all models to ensure they are registered with SQLAlchemy
from .blob import StoredBlob
from .dream import Analysis, Collection, Dream, merge_labels, utcnow

# Make models available at package level
__all__ = ['StoredBlob', 'Analysis', 'Collection', 'Dream', 'merge_labels', 'utcnow']
