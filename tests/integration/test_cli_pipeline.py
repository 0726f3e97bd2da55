from __future__ import annotations

import io
import json

from gluestick import cli


def test_cli_scrapes_mock_target(target_fetcher, tmp_path) -> None:
    request_file = tmp_path / "request.json"
    request_file.write_text(
        json.dumps(
            {
                "url": "http://testserver/articles",
                "items": {"titles": {"selector": "article h3", "fields": {"text": ""}}},
            }
        ),
        encoding="utf-8",
    )
    stdout = io.StringIO()

    code = cli.main(["-f", str(request_file)], stdout=stdout)

    assert code == 0
    assert json.loads(stdout.getvalue()) == {
        "titles": [{"text": "Parser released"}, {"text": "Selectors explained"}]
    }


def test_cli_exits_1_on_upstream_failure(target_fetcher) -> None:
    payload = json.dumps(
        {"url": "http://testserver/gone", "items": {"h": {"selector": "h1", "fields": {"t": ""}}}}
    )
    assert cli.main(["-in", payload], stdout=io.StringIO()) == 1
