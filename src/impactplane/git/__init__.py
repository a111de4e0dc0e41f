"""Git integration: commit resolution."""

from impactplane.git.commit import CommitDescriptor, CommitResolver, read_commit_from_git

__all__ = ["CommitDescriptor", "CommitResolver", "read_commit_from_git"]
