"""Catalog bookkeeping for factories, workshops, workbenches and repos."""

from __future__ import annotations

import logging
from pathlib import Path

from workshopinfra.errors import NotFoundError
from workshopinfra.infra.db.factories import FactoryRepo
from workshopinfra.infra.db.repos import RepoRepo
from workshopinfra.infra.db.workbenches import WorkbenchRepo
from workshopinfra.infra.db.workshops import WorkshopRepo
from workshopinfra.models.repo import Repo
from workshopinfra.models.workbench import Workbench, WorkbenchStatus
from workshopinfra.models.workshop import Factory, Workshop, WorkshopStatus

logger = logging.getLogger(__name__)


class CatalogService:
    """Creates and archives the records the reconciler works from."""

    def __init__(
        self,
        factory_repo: FactoryRepo,
        workshop_repo: WorkshopRepo,
        workbench_repo: WorkbenchRepo,
        repo_repo: RepoRepo,
    ) -> None:
        self._factories = factory_repo
        self._workshops = workshop_repo
        self._workbenches = workbench_repo
        self._repos = repo_repo

    async def create_factory(self, name: str) -> Factory:
        if not name:
            raise ValueError("Factory name cannot be empty")
        factory = await self._factories.insert(
            Factory(id=await self._factories.next_id(), name=name)
        )
        logger.info("Created factory: %s (%s)", factory.name, factory.id)
        return factory

    async def list_factories(self) -> list[Factory]:
        return await self._factories.list_all()

    async def create_workshop(self, name: str, factory_id: str) -> Workshop:
        if await self._factories.find_by_id(factory_id) is None:
            raise NotFoundError("factory", factory_id)
        workshop = Workshop(id=await self._workshops.next_id(), name=name, factory_id=factory_id)
        await self._workshops.insert(workshop)
        logger.info("Created workshop: %s (%s)", workshop.name, workshop.id)
        return workshop

    async def list_workshops(self, factory_id: str = "") -> list[Workshop]:
        return await self._workshops.list_all(factory_id=factory_id)

    async def archive_workshop(self, workshop_id: str) -> Workshop:
        workshop = await self._workshops.update_status(workshop_id, WorkshopStatus.ARCHIVED)
        if workshop is None:
            raise NotFoundError("workshop", workshop_id)
        logger.info("Archived workshop: %s", workshop_id)
        return workshop

    async def create_workbench(
        self,
        name: str,
        workshop_id: str,
        repo_id: str = "",
        home_branch: str = "",
    ) -> Workbench:
        """Register a workbench. Its tree is created by the next infra apply."""
        if await self._workshops.find_by_id(workshop_id) is None:
            raise NotFoundError("workshop", workshop_id)
        if repo_id and await self._repos.find_by_id(repo_id) is None:
            raise NotFoundError("repo", repo_id)
        if await self._workbenches.find_by_name(name) is not None:
            raise ValueError(f"Workbench named '{name}' already exists")

        workbench = Workbench(
            id=await self._workbenches.next_id(),
            name=name,
            workshop_id=workshop_id,
            repo_id=repo_id,
            home_branch=home_branch,
        )
        await self._workbenches.insert(workbench)
        logger.info("Created workbench: %s (%s)", workbench.name, workbench.id)
        return workbench

    async def list_workbenches(self, workshop_id: str) -> list[Workbench]:
        return await self._workbenches.list_by_workshop(workshop_id)

    async def archive_workbench(self, workbench_id: str) -> Workbench:
        workbench = await self._workbenches.update_status(workbench_id, WorkbenchStatus.ARCHIVED)
        if workbench is None:
            raise NotFoundError("workbench", workbench_id)
        logger.info("Archived workbench: %s", workbench_id)
        return workbench

    async def add_repo(self, name: str, local_path: str) -> Repo:
        resolved = Path(local_path).expanduser().resolve()
        if not resolved.is_dir():
            raise ValueError(f"Repository path is not a directory: {resolved}")
        if await self._repos.find_by_name(name) is not None:
            raise ValueError(f"Repo named '{name}' already exists")
        repo = Repo(id=await self._repos.next_id(), name=name, local_path=str(resolved))
        await self._repos.insert(repo)
        logger.info("Registered repo: %s (%s)", repo.name, repo.local_path)
        return repo

    async def list_repos(self) -> list[Repo]:
        return await self._repos.list_all()
