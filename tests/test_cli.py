"""
rpcc CLI (cli/__main__.py).
"""

import json
import textwrap

import pytest
from click.testing import CliRunner

from rpc_controllers.cli.__main__ import as_controllers, cli

APP_SOURCE = textwrap.dedent('''
    from rpc_controllers import Mutation, Query, Router, UseMiddlewares, UseSchema


    class NameInput:
        @staticmethod
        def parse(value):
            return value


    async def audit(call):
        return await call.next()


    @Router("users")
    @UseMiddlewares(audit)
    class UsersController:
        @Query("byId")
        @UseSchema(NameInput)
        def get_by_id(self, call):
            return call.input

        @Mutation()
        def rename(self, call):
            return None


    class Broken:
        @Query("dup")
        def first(self, call):
            return None

        @Query("dup")
        def second(self, call):
            return None


    controllers = [UsersController()]
    broken = [Broken]
''')


@pytest.fixture
def app_module(tmp_path, monkeypatch):
    """Write a controllers module to a temp dir and return its import name."""
    name = f"rpcc_app_{tmp_path.name}"
    (tmp_path / f"{name}.py").write_text(APP_SOURCE)
    monkeypatch.syspath_prepend(str(tmp_path))
    return name


@pytest.fixture
def runner():
    return CliRunner()


class TestRoutesCommand:

    def test_json(self, runner, app_module):
        result = runner.invoke(cli, ["routes", f"{app_module}:controllers", "--json"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        routes = payload["users"]
        assert [r["route"] for r in routes] == ["byId", "rename"]
        assert routes[0]["kind"] == "query"
        assert routes[0]["input"] == "NameInput"
        assert routes[0]["middlewares"] == 1
        assert routes[1]["kind"] == "mutation"

    def test_table(self, runner, app_module):
        result = runner.invoke(cli, ["routes", f"{app_module}:UsersController"])
        assert result.exit_code == 0, result.output
        assert "users.byId" in result.output
        assert "users.rename" in result.output

    def test_registration_failure(self, runner, app_module):
        result = runner.invoke(cli, ["routes", f"{app_module}:broken"])
        assert result.exit_code == 1
        assert "DUPLICATE_ROUTE" in result.output

    def test_bad_target(self, runner):
        result = runner.invoke(cli, ["routes", "no_such_module_xyz:thing"])
        assert result.exit_code != 0

    def test_malformed_target(self, runner):
        result = runner.invoke(cli, ["routes", "missing_colon"])
        assert result.exit_code != 0
        assert "MODULE:ATTR" in result.output


class TestCheckCommand:

    def test_ok(self, runner, app_module):
        result = runner.invoke(cli, ["check", f"{app_module}:controllers"])
        assert result.exit_code == 0, result.output
        assert "1 controller(s), 2 procedure(s) OK" in result.output

    def test_duplicate_route(self, runner, app_module):
        result = runner.invoke(cli, ["check", f"{app_module}:broken"])
        assert result.exit_code == 1
        assert "DUPLICATE_ROUTE" in result.output


class TestAsControllers:

    def test_single_controller_is_wrapped(self):
        class Users:
            pass

        assert as_controllers(Users) == [Users]

    def test_collections_pass_through(self):
        mapping = {"a": object()}
        assert as_controllers(mapping) is mapping
        assert as_controllers([1]) == [1]
