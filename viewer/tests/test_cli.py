import asyncio
import io
import unittest

import pytest
from aiohttp.test_utils import TestServer, unused_port

from queue_viewer import cli
from queue_viewer.config import ViewerConfig

from tests.queue_server_util import FakeQueueServer, wait_for


def test_rejects_unsupported_origin():
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["watch", "--origin", "ftp://queue.local"])
    assert excinfo.value.code == 2


def test_rejects_non_positive_interval():
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["watch", "--reconnect-interval", "0"])
    assert excinfo.value.code == 2


@pytest.mark.parametrize("value", ["0", "-3"])
def test_rejects_max_changes_below_one(value):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["watch", "--max-changes", value])
    assert excinfo.value.code == 2


def test_action_against_unreachable_server_fails():
    origin = f"http://127.0.0.1:{unused_port()}"

    assert cli.main(["remove", "m1", "--origin", origin]) == 1
    assert cli.main(["deliver", "m1", "--legacy", "--origin", origin]) == 1
    assert cli.main(["show", "m1", "--origin", origin], output=io.StringIO()) == 1


class CliSessionTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.fake = FakeQueueServer({"m0": {"to": ["z@x"], "subject": ["old"]}})
        self.server = TestServer(self.fake.app)
        await self.server.start_server()
        self.config = ViewerConfig(origin=str(self.server.make_url("/")), reconnect_interval_s=0.05)

    async def asyncTearDown(self):
        await self.server.close()

    async def test_watch_prints_changes(self):
        output = io.StringIO()

        async def feed() -> None:
            await wait_for(lambda: self.fake.clients)
            await self.fake.add("m1", {"to": ["a@x"], "subject": ["hi"]})
            await self.fake.delete("m0")

        feeder = asyncio.create_task(feed())
        result = await asyncio.wait_for(cli.run_watch(self.config, output, max_changes=3), timeout=5)
        await feeder

        self.assertEqual(result, 0)
        self.assertEqual(
            output.getvalue().splitlines(),
            ["sync 1 message(s)", "add m1  to: a@x  subject: hi", "del m0"],
        )

    async def test_remove_action_is_sent(self):
        result = await cli.run_action(self.config, {"action": "remove", "id": "m0"})

        self.assertEqual(result, 0)
        await wait_for(lambda: self.fake.received)
        self.assertEqual(self.fake.received, [{"action": "remove", "id": "m0"}])
        self.assertNotIn("m0", self.fake.messages)

    async def test_show_prints_message_details(self):
        self.fake.messages["m1"] = {"from": ["me@x"], "to": ["a@x"], "subject": ["hi"], "o:tag": ["t"]}
        output = io.StringIO()

        result = await cli.run_show(self.config, "m1", output, timeout_s=5)

        self.assertEqual(result, 0)
        lines = output.getvalue().splitlines()
        self.assertEqual(lines[:4], ["Message-Id: m1", "from: me@x", "to: a@x", "subject: hi"])
        self.assertIn(' "o:tag": [', output.getvalue())

    async def test_show_unknown_message_fails(self):
        output = io.StringIO()

        result = await cli.run_show(self.config, "nope", output, timeout_s=5)

        self.assertEqual(result, 1)
        self.assertEqual(output.getvalue(), "nope: not in queue\n")

    async def test_show_times_out_without_sync(self):
        self.fake.send_sync = False

        result = await cli.run_show(self.config, "m0", io.StringIO(), timeout_s=0.1)

        self.assertEqual(result, 1)


if __name__ == "__main__":
    unittest.main()
