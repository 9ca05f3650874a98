"""AppContext: wires DB, config, adapters and services together."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from workshopinfra.config import AppConfig, load_config
from workshopinfra.infra.db.client import MongoClient
from workshopinfra.layout import InfraLayout

if TYPE_CHECKING:
    from pathlib import Path

    from workshopinfra.infra.base import EffectRunner
    from workshopinfra.infra.db.factories import FactoryRepo
    from workshopinfra.infra.db.gatehouses import GatehouseRepo
    from workshopinfra.infra.db.repos import RepoRepo
    from workshopinfra.infra.db.workbenches import WorkbenchRepo
    from workshopinfra.infra.db.workshops import WorkshopRepo
    from workshopinfra.infra.tmux import TmuxAdapter
    from workshopinfra.services.catalog_service import CatalogService
    from workshopinfra.services.infra_service import InfraService

logger = logging.getLogger(__name__)


class AppContext:
    """Central wiring for all application dependencies.

    Lazily initializes repos and services on first access. Call
    `initialize()` to set up the database connection and run migrations.
    """

    def __init__(self, config: AppConfig | None = None, config_path: Path | None = None) -> None:
        self.config = config or load_config(config_path)
        self.layout = InfraLayout.from_config(self.config)
        self._mongo: MongoClient | None = None
        self._factory_repo: FactoryRepo | None = None
        self._workshop_repo: WorkshopRepo | None = None
        self._workbench_repo: WorkbenchRepo | None = None
        self._gatehouse_repo: GatehouseRepo | None = None
        self._repo_repo: RepoRepo | None = None
        self._tmux: TmuxAdapter | None = None
        self._catalog_service: CatalogService | None = None

    async def initialize(self) -> None:
        """Initialize the database connection and run migrations."""
        from workshopinfra.infra.db.migrations import run_migrations

        self._mongo = MongoClient(self.config.mongodb)
        await self._mongo.ensure_reachable()
        await run_migrations(self._mongo.db)
        logger.info("AppContext initialized")

    async def close(self) -> None:
        """Close all connections."""
        if self._mongo:
            self._mongo.close()
        logger.info("AppContext closed")

    @property
    def mongo(self) -> MongoClient:
        if self._mongo is None:
            raise RuntimeError("AppContext not initialized. Call initialize() first.")
        return self._mongo

    @property
    def factory_repo(self) -> FactoryRepo:
        if self._factory_repo is None:
            from workshopinfra.infra.db.factories import FactoryRepo

            self._factory_repo = FactoryRepo(self.mongo.db)
        return self._factory_repo

    @property
    def workshop_repo(self) -> WorkshopRepo:
        if self._workshop_repo is None:
            from workshopinfra.infra.db.workshops import WorkshopRepo

            self._workshop_repo = WorkshopRepo(self.mongo.db)
        return self._workshop_repo

    @property
    def workbench_repo(self) -> WorkbenchRepo:
        if self._workbench_repo is None:
            from workshopinfra.infra.db.workbenches import WorkbenchRepo

            self._workbench_repo = WorkbenchRepo(self.mongo.db)
        return self._workbench_repo

    @property
    def gatehouse_repo(self) -> GatehouseRepo:
        if self._gatehouse_repo is None:
            from workshopinfra.infra.db.gatehouses import GatehouseRepo

            self._gatehouse_repo = GatehouseRepo(self.mongo.db)
        return self._gatehouse_repo

    @property
    def repo_repo(self) -> RepoRepo:
        if self._repo_repo is None:
            from workshopinfra.infra.db.repos import RepoRepo

            self._repo_repo = RepoRepo(self.mongo.db)
        return self._repo_repo

    @property
    def tmux(self) -> TmuxAdapter | None:
        """The tmux adapter, or None when tmux is disabled in config."""
        if not self.config.tmux.enabled:
            return None
        if self._tmux is None:
            from workshopinfra.infra.tmux import TmuxAdapter

            tmux_cfg = self.config.tmux
            self._tmux = TmuxAdapter(
                editor_command=tmux_cfg.editor_command,
                imp_command=tmux_cfg.imp_command,
                goblin_command=tmux_cfg.goblin_command,
            )
        return self._tmux

    @property
    def catalog_service(self) -> CatalogService:
        if self._catalog_service is None:
            from workshopinfra.services.catalog_service import CatalogService

            self._catalog_service = CatalogService(
                factory_repo=self.factory_repo,
                workshop_repo=self.workshop_repo,
                workbench_repo=self.workbench_repo,
                repo_repo=self.repo_repo,
            )
        return self._catalog_service

    def infra_service(self, executor: EffectRunner | None = None) -> InfraService:
        """Build an InfraService; pass a recording executor for dry runs."""
        from workshopinfra.services.infra_service import InfraService

        return InfraService(
            workshop_repo=self.workshop_repo,
            factory_repo=self.factory_repo,
            workbench_repo=self.workbench_repo,
            gatehouse_repo=self.gatehouse_repo,
            repo_repo=self.repo_repo,
            config=self.config,
            layout=self.layout,
            tmux=self.tmux,
            executor=executor,
        )
