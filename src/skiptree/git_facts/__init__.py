from .git import GitRevisionTree, RevisionNotFound

__all__ = ["GitRevisionTree", "RevisionNotFound"]
