"""
Git Flow decision tables.

Three independent questions are answered here, each by its own table:

* BASE_REQUIREMENT - which branch type a new branch must be created from
* MERGE_TARGETS - which branch types a branch may be merged into
* ORIGIN_POLICY - whether new branches may be created from a branch type

Creation base and merge destination are different relations (a release
branch is created from develop but merges into main and develop), so they
are kept apart. UNKNOWN is permissive in all three tables.
"""

from typing import Dict, FrozenSet, Optional

from ..models.branch import BranchType, OriginPolicy
from .branch_classifier import classify

ALL_BRANCH_TYPES: FrozenSet[BranchType] = frozenset(BranchType)

BASE_REQUIREMENT: Dict[BranchType, Optional[BranchType]] = {
    BranchType.MAIN: None,
    BranchType.DEVELOP: None,
    BranchType.FEATURE: BranchType.DEVELOP,
    BranchType.BUGFIX: BranchType.DEVELOP,
    BranchType.SUPPORT: BranchType.DEVELOP,
    BranchType.RELEASE: BranchType.DEVELOP,
    BranchType.HOTFIX: BranchType.MAIN,
    BranchType.UNKNOWN: None,
}

MERGE_TARGETS: Dict[BranchType, FrozenSet[BranchType]] = {
    BranchType.FEATURE: frozenset({BranchType.DEVELOP}),
    BranchType.BUGFIX: frozenset({BranchType.DEVELOP}),
    BranchType.SUPPORT: frozenset({BranchType.DEVELOP}),
    BranchType.RELEASE: frozenset({BranchType.MAIN, BranchType.DEVELOP}),
    BranchType.HOTFIX: frozenset({BranchType.MAIN, BranchType.DEVELOP}),
    # Long-lived branches are merge targets, never merge sources
    BranchType.MAIN: frozenset(),
    BranchType.DEVELOP: frozenset(),
    BranchType.UNKNOWN: ALL_BRANCH_TYPES,
}

ORIGIN_POLICY: Dict[BranchType, OriginPolicy] = {
    BranchType.MAIN: OriginPolicy.ALLOWED,
    BranchType.DEVELOP: OriginPolicy.ALLOWED,
    BranchType.RELEASE: OriginPolicy.BLOCKED,
    BranchType.HOTFIX: OriginPolicy.BLOCKED,
    BranchType.FEATURE: OriginPolicy.UNUSUAL,
    BranchType.BUGFIX: OriginPolicy.UNUSUAL,
    BranchType.SUPPORT: OriginPolicy.UNUSUAL,
    BranchType.UNKNOWN: OriginPolicy.ALLOWED,
}


def required_base(branch_type: BranchType) -> Optional[BranchType]:
    """Branch type a new branch of ``branch_type`` must start from."""
    return BASE_REQUIREMENT[branch_type]


def allowed_merge_targets(source_type: BranchType) -> FrozenSet[BranchType]:
    return MERGE_TARGETS[source_type]


def can_originate_branches(branch_type: BranchType) -> OriginPolicy:
    return ORIGIN_POLICY[branch_type]


def is_merge_allowed(source_branch: str, target_branch: str) -> bool:
    """Whether merging ``source_branch`` into ``target_branch`` follows Git Flow."""
    return classify(target_branch) in allowed_merge_targets(classify(source_branch))


def is_valid_origin(branch: str, base_branch: str) -> bool:
    """Whether ``branch`` was created from a branch of the required type."""
    base_type = required_base(classify(branch))
    if base_type is None:
        return True
    return classify(base_branch) is base_type


def describe_allowed_bases(branch_type: BranchType) -> str:
    base_type = required_base(branch_type)
    if base_type is None:
        return "none (long-lived branch)" if branch_type.is_long_lived else "develop or main"
    return base_type.value


def describe_merge_targets(source_type: BranchType) -> str:
    targets = allowed_merge_targets(source_type)
    if targets == ALL_BRANCH_TYPES:
        return "any branch"
    if not targets:
        return "no branch"
    return " and ".join(sorted(target.value for target in targets))
