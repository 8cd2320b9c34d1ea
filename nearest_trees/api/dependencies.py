"""
Dependency injection for FastAPI.
"""
from typing import Annotated
from fastapi import Depends

from nearest_trees.infrastructure.spatial_store import (
    TreeRepository,
    get_tree_repository,
)
from nearest_trees.services.tree_service import TreeService


def get_tree_service(
    repository: Annotated[TreeRepository, Depends(get_tree_repository)],
) -> TreeService:
    """
    Dependency factory for TreeService.

    Args:
        repository: Tree repository (injected)

    Returns:
        TreeService instance
    """
    return TreeService(repository=repository)


# Type aliases for cleaner route signatures
TreeServiceDep = Annotated[TreeService, Depends(get_tree_service)]
TreeRepositoryDep = Annotated[TreeRepository, Depends(get_tree_repository)]
