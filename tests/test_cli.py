# Copyright (C) 2022 The Etsuko Contributors
#
# This file is part of Etsuko.
#
# Etsuko is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# Etsuko is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with Etsuko.  If not, see <http://www.gnu.org/licenses/>.
import argparse

import pytest

from etsuko.__main__ import build_parser, parse_bind


class TestCommandLine:
    def test_parse_bind(self):
        assert parse_bind("8080") == (None, 8080)
        assert parse_bind("127.0.0.1:8080") == ("127.0.0.1", 8080)
        assert parse_bind("::1:8080") == ("::1", 8080)
        with pytest.raises(argparse.ArgumentTypeError):
            parse_bind("localhost:http")

    def test_defaults_come_from_environment(self, monkeypatch):
        monkeypatch.setenv("ETSUKO_DATABASE", "/tmp/etsuko.db")
        monkeypatch.setenv("ETSUKO_COOLDOWN", "5")
        monkeypatch.setenv("ETSUKO_CREDENTIAL_POLICY", "argon2")
        args = build_parser().parse_args([])
        assert args.database == "/tmp/etsuko.db"
        assert args.cooldown == 5.0
        assert args.credential_policy == "argon2"

    def test_flags_win_over_environment(self, monkeypatch):
        monkeypatch.setenv("ETSUKO_DATABASE", "/tmp/etsuko.db")
        args = build_parser().parse_args(
            ["--database", ":mem:", "--bind", "9000", "--bind", "0.0.0.0:9001"]
        )
        assert args.database == ":mem:"
        assert args.bind == [(None, 9000), ("0.0.0.0", 9001)]
