"""Unit tests for the upstream server registry module."""

import pytest
from unittest.mock import AsyncMock, patch

from mcp_aggregator.registry.config import ServerConfig, ServerRegistryConfig, load_server_registry
from mcp_aggregator.registry.exceptions import ServerNotFoundError
from mcp_aggregator.registry.models import UpstreamServer
from mcp_aggregator.registry.service import (
    discover_server_tools,
    get_enabled_upstream_configs,
    list_servers_for_user,
    sync_servers_from_config,
    to_upstream_config,
)


def _server(name: str, url: str | None = None, tool_settings: dict | None = None, id: int = 1) -> UpstreamServer:
    return UpstreamServer(
        id=id,
        name=name,
        url=url or f"http://{name}.test/mcp",
        description=f"{name} server",
        is_active=True,
        tool_settings=tool_settings,
    )


class TestServerModel:
    """Tests for the UpstreamServer model."""

    def test_repr(self):
        server = _server("docs")

        assert "docs" in repr(server)
        assert "http://docs.test/mcp" in repr(server)


class TestRegistryConfig:
    """Tests for loading the static YAML registry."""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "upstreams.yaml"
        path.write_text(
            "servers:\n"
            "  - name: docs\n"
            "    url: http://docs.test/mcp\n"
            "  - name: github\n"
            "    url: http://github.test/mcp\n"
            "    tools:\n"
            "      delete_repository: false\n"
            "    enabled_for: [alice]\n",
            encoding="utf-8",
        )

        config = load_server_registry(str(path))

        assert [s.name for s in config.servers] == ["docs", "github"]
        assert config.servers[0].enabled_for == ["*"]
        assert config.servers[0].tools == {}
        assert config.servers[1].tools == {"delete_repository": False}
        assert config.servers[1].enabled_for == ["alice"]

    def test_missing_file_is_empty(self, tmp_path):
        config = load_server_registry(str(tmp_path / "absent.yaml"))

        assert config.servers == []

    def test_empty_file_is_empty(self, tmp_path):
        path = tmp_path / "upstreams.yaml"
        path.write_text("", encoding="utf-8")

        assert load_server_registry(str(path)).servers == []

    def test_bundled_config_loads(self):
        config = load_server_registry()

        assert {s.name for s in config.servers} == {"docs", "github"}


class TestUpstreamConfigs:
    """Tests for resolving a caller's upstream configs."""

    def test_to_upstream_config(self):
        config = to_upstream_config(_server("gh", tool_settings={"delete": False}))

        assert config.name == "gh"
        assert config.url == "http://gh.test/mcp"
        assert config.tool_enabled == {"delete": False}
        assert config.is_tool_enabled("delete") is False
        assert config.is_tool_enabled("read") is True

    def test_to_upstream_config_without_flags(self):
        assert to_upstream_config(_server("docs")).tool_enabled is None

    @pytest.mark.asyncio
    async def test_get_enabled_upstream_configs(self):
        servers = [_server("docs", id=1), _server("gh", id=2)]

        with patch("mcp_aggregator.registry.service.get_enabled_servers_for_user", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = servers
            db = AsyncMock()
            configs = await get_enabled_upstream_configs(db, "alice")

        mock_get.assert_awaited_once_with(db, "alice")
        assert [c.name for c in configs] == ["docs", "gh"]

    @pytest.mark.asyncio
    async def test_list_servers_for_user(self):
        servers = [_server("gh", tool_settings={"delete": False})]

        with patch("mcp_aggregator.registry.service.get_enabled_servers_for_user", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = servers
            result = await list_servers_for_user(AsyncMock(), "alice")

        assert result.count == 1
        assert result.servers[0].name == "gh"
        assert result.servers[0].tools == {"delete": False}


class TestDiscoverServerTools:
    """Tests for live tool discovery on one server."""

    @pytest.mark.asyncio
    async def test_reports_enable_flags(self, network, http_client, make_tool):
        up = network.add("gh", tools=[make_tool("read"), make_tool("delete")])
        servers = [_server("gh", url=up.url, tool_settings={"delete": False})]

        with patch("mcp_aggregator.registry.service.get_enabled_servers_for_user", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = servers
            result = await discover_server_tools(AsyncMock(), http_client, "alice", "gh")

        assert result.server == "gh"
        assert result.count == 2
        assert [(t.name, t.enabled) for t in result.tools] == [("read", True), ("delete", False)]

    @pytest.mark.asyncio
    async def test_unreachable_server_has_no_tools(self, network, http_client):
        servers = [_server("down", url=network.unreachable_url("down"))]

        with patch("mcp_aggregator.registry.service.get_enabled_servers_for_user", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = servers
            result = await discover_server_tools(AsyncMock(), http_client, "alice", "down")

        assert result.tools == []
        assert result.count == 0

    @pytest.mark.asyncio
    async def test_server_not_enabled_for_user(self, http_client):
        with patch("mcp_aggregator.registry.service.get_enabled_servers_for_user", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = []

            with pytest.raises(ServerNotFoundError) as exc_info:
                await discover_server_tools(AsyncMock(), http_client, "bob", "gh")

        assert exc_info.value.code == "SERVER_NOT_FOUND"


class TestSyncServers:
    """Tests for seeding the registry from static config."""

    @pytest.mark.asyncio
    async def test_sync_creates_new_servers(self):
        config = ServerRegistryConfig(servers=[
            ServerConfig(name="gh", url="http://gh.test/mcp", tools={"delete": False}, enabled_for=["alice"]),
        ])
        created = _server("gh", id=9)

        with patch("mcp_aggregator.registry.service.load_server_registry", return_value=config):
            with patch("mcp_aggregator.registry.service.get_server_by_name", new_callable=AsyncMock) as mock_get:
                mock_get.return_value = None
                with patch("mcp_aggregator.registry.service.create_server", new_callable=AsyncMock) as mock_create:
                    mock_create.return_value = created
                    with patch("mcp_aggregator.registry.service.set_server_enablements", new_callable=AsyncMock) as mock_enable:
                        with patch("mcp_aggregator.registry.service.deactivate_servers_not_in_list", new_callable=AsyncMock) as mock_prune:
                            mock_prune.return_value = 0
                            db = AsyncMock()
                            await sync_servers_from_config(db)

                            _, kwargs = mock_create.await_args
                            assert kwargs["name"] == "gh"
                            assert kwargs["tool_settings"] == {"delete": False}
                            mock_enable.assert_awaited_once_with(db, 9, {"alice"})
                            mock_prune.assert_awaited_once_with(db, {"gh"})

    @pytest.mark.asyncio
    async def test_sync_updates_changed_server(self):
        config = ServerRegistryConfig(servers=[
            ServerConfig(name="gh", url="http://new.test/mcp", description="gh server"),
        ])
        existing = _server("gh", url="http://old.test/mcp")

        with patch("mcp_aggregator.registry.service.load_server_registry", return_value=config):
            with patch("mcp_aggregator.registry.service.get_server_by_name", new_callable=AsyncMock) as mock_get:
                mock_get.return_value = existing
                with patch("mcp_aggregator.registry.service.create_server", new_callable=AsyncMock) as mock_create:
                    with patch("mcp_aggregator.registry.service.set_server_enablements", new_callable=AsyncMock):
                        with patch("mcp_aggregator.registry.service.deactivate_servers_not_in_list", new_callable=AsyncMock):
                            db = AsyncMock()
                            await sync_servers_from_config(db)

                            mock_create.assert_not_awaited()
                            assert existing.url == "http://new.test/mcp"
                            db.commit.assert_awaited()

    @pytest.mark.asyncio
    async def test_sync_empty_config_is_noop(self):
        with patch("mcp_aggregator.registry.service.load_server_registry", return_value=ServerRegistryConfig()):
            with patch("mcp_aggregator.registry.service.deactivate_servers_not_in_list", new_callable=AsyncMock) as mock_prune:
                await sync_servers_from_config(AsyncMock())

                mock_prune.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sync_rejects_duplicate_names(self):
        config = ServerRegistryConfig(servers=[
            ServerConfig(name="gh", url="http://a.test/mcp"),
            ServerConfig(name="gh", url="http://b.test/mcp"),
        ])

        with patch("mcp_aggregator.registry.service.load_server_registry", return_value=config):
            with patch("mcp_aggregator.registry.service.get_server_by_name", new_callable=AsyncMock) as mock_get:
                mock_get.return_value = _server("gh")
                with patch("mcp_aggregator.registry.service.set_server_enablements", new_callable=AsyncMock):
                    with pytest.raises(ValueError, match="duplicate server name"):
                        await sync_servers_from_config(AsyncMock())
