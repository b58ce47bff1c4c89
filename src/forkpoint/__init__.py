"""git-fork-point entry point.

Finds the commit a stacked branch should be replayed from after the branch it
was built on has been rebased. See `git-fork-point --help` for details.
"""
