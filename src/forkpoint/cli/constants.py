"""Exit statuses of the git-fork-point command."""

EXIT_SUCCESS = 0

# HEAD problems share the generic failure status
EXIT_UNBORN_BRANCH = 1
EXIT_DETACHED_HEAD = 1

# A missing base branch gets its own status so scripts can tell it apart
EXIT_BRANCH_NOT_FOUND = 3

# Same status git uses for "not a git repository"
EXIT_NOT_A_REPOSITORY = 128

# EX_SOFTWARE from sysexits.h
EXIT_INTERNAL_ERROR = 70
