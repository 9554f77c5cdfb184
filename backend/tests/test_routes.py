import io
import os
import time
import unittest
from unittest import mock

from openpyxl import Workbook

import backend.config as config_module
from backend.app import create_app

TEST_ENV = {
    "FLASK_DEBUG": "0",
    "DRAW__DIGIT_COUNT": "3",
    "DRAW__MIN_VALUE": "0",
    "DRAW__MAX_VALUE": "999",
    "REVEAL__TICK_INTERVAL_MS": "10",
    "REVEAL__GENERATING_TIME_MS": "200",
    "REVEAL__DIGIT_STOP_DELAY_MS": "20",
    "REVEAL__SETTLE_DELAY_MS": "20",
}


class LuckyDrawRoutesTests(unittest.TestCase):
    def setUp(self) -> None:
        self._env = mock.patch.dict(os.environ, TEST_ENV)
        self._env.start()
        config_module.load_settings.cache_clear()

        self.app = create_app()
        self.client = self.app.test_client()

    def tearDown(self) -> None:
        self.app.extensions["luckydraw"].shutdown()
        self._env.stop()
        config_module.load_settings.cache_clear()

    def _wait_until_idle(self, timeout: float = 3.0) -> dict:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            state = self.client.get("/state").get_json()
            if state["state"] == "idle":
                return state
            time.sleep(0.01)
        self.fail("draw did not settle in time")

    def test_health(self) -> None:
        resp = self.client.get("/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json(), {"status": "ok", "state": "idle"})

    def test_roster_draw_lifecycle(self) -> None:
        resp = self.client.post("/roster", json={"entries": [{"number": 42, "user": "Ada"}]})
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.get_json(), {"roster_size": 1, "remaining_entries": 1, "digit_count": 2})

        resp = self.client.post("/draw")
        self.assertEqual(resp.status_code, 202)
        self.assertEqual(resp.get_json(), {"status": "accepted", "state": "revealing"})

        during = self.client.get("/state").get_json()
        self.assertEqual(during["state"], "revealing")
        self.assertIsNone(during["value"])

        second = self.client.post("/draw")
        self.assertEqual(second.status_code, 409)
        self.assertEqual(second.get_json()["code"], "already_running")

        state = self._wait_until_idle()
        self.assertEqual(state["value"], "42")
        self.assertEqual(state["owner"], "Ada")
        self.assertEqual([slot["value"] for slot in state["slots"]], [4, 2])
        self.assertTrue(all(slot["stopped"] for slot in state["slots"]))
        self.assertEqual(state["remaining_entries"], 0)

        history = self.client.get("/history").get_json()
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0]["value"], "42")
        self.assertEqual(history[0]["owner"], "Ada")

    def test_range_exhaustion_is_reported(self) -> None:
        resp = self.client.put("/config", json={"digit_count": 1, "min_value": 0, "max_value": 0})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["max_value"], 0)

        self.assertEqual(self.client.post("/draw").status_code, 202)
        state = self._wait_until_idle()
        self.assertEqual(state["value"], "0")
        self.assertIsNone(state["owner"])
        self.assertEqual(self.client.get("/history").get_json()[0]["owner"], "Random Guest")

        resp = self.client.post("/draw")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.get_json()["code"], "exhausted")

    def test_reset_discards_in_flight_draw(self) -> None:
        self.assertEqual(self.client.post("/draw").status_code, 202)

        resp = self.client.post("/reset")
        self.assertEqual(resp.status_code, 200)
        payload = resp.get_json()
        self.assertEqual(payload["state"], "idle")
        self.assertEqual(payload["slots"], [])
        self.assertEqual(payload["drawn_values"], 0)

        time.sleep(0.4)
        self.assertEqual(self.client.get("/history").get_json(), [])
        self.assertEqual(self.client.get("/state").get_json()["slots"], [])

    def test_clear_history_keeps_session_running(self) -> None:
        self.client.post("/draw")
        self._wait_until_idle()
        self.assertEqual(len(self.client.get("/history").get_json()), 1)

        resp = self.client.delete("/history")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.client.get("/history").get_json(), [])
        self.assertEqual(self.client.get("/state").get_json()["drawn_values"], 1)

    def test_invalid_config_is_rejected(self) -> None:
        resp = self.client.put("/config", json={"min_value": 10, "max_value": 5})
        self.assertEqual(resp.status_code, 400)

        resp = self.client.put("/config", json={"digit_count": 0})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"], "validation_error")

        config = self.client.get("/config").get_json()
        self.assertEqual((config["min_value"], config["max_value"]), (0, 999))

    def test_config_update_changes_timing(self) -> None:
        resp = self.client.put("/config", json={"generating_time_ms": 50, "default_owner": "Guest"})
        self.assertEqual(resp.status_code, 200)
        payload = resp.get_json()
        self.assertEqual(payload["generating_time_ms"], 50)
        self.assertEqual(payload["digit_stop_delay_ms"], 20)
        self.assertEqual(payload["default_owner"], "Guest")

    def test_csv_upload_replaces_roster(self) -> None:
        data = {"file": (io.BytesIO(b"number,user\n7,Ada\n123,Bo\n"), "roster.csv")}
        resp = self.client.post("/roster/upload", data=data, content_type="multipart/form-data")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.get_json(), {"roster_size": 2, "remaining_entries": 2, "digit_count": 3})

        roster = self.client.get("/roster").get_json()
        self.assertEqual(roster["entries"], [{"number": 7, "user": "Ada"}, {"number": 123, "user": "Bo"}])

    def test_bad_roster_payloads(self) -> None:
        self.assertEqual(self.client.post("/roster", json={"entries": []}).status_code, 400)
        self.assertEqual(
            self.client.post("/roster", json={"entries": [{"number": -1, "user": "Ada"}]}).status_code,
            400,
        )
        data = {"file": (io.BytesIO(b"number,user\nabc,Ada\n"), "roster.csv")}
        resp = self.client.post("/roster/upload", data=data, content_type="multipart/form-data")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Row 2", resp.get_json()["error"])

    def test_xlsx_upload_replaces_roster(self) -> None:
        workbook = Workbook()
        sheet = workbook.active
        for row in (("number", "user"), (42, "Ada"), (1234, "Bo")):
            sheet.append(row)
        buffer = io.BytesIO()
        workbook.save(buffer)
        buffer.seek(0)

        data = {"file": (buffer, "roster.xlsx")}
        resp = self.client.post("/roster/upload", data=data, content_type="multipart/form-data")

        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.get_json(), {"roster_size": 2, "remaining_entries": 2, "digit_count": 4})

    def test_unreadable_xlsx_upload(self) -> None:
        data = {"file": (io.BytesIO(b"not a workbook"), "roster.xlsx")}
        resp = self.client.post("/roster/upload", data=data, content_type="multipart/form-data")
        self.assertEqual(resp.status_code, 400)

    def test_runtime_shutdown_registered_at_exit(self) -> None:
        with mock.patch("backend.app.atexit.register") as register:
            app = create_app()
        runtime = app.extensions["luckydraw"]
        try:
            register.assert_called_once_with(runtime.shutdown)
        finally:
            runtime.shutdown()

    def test_unknown_route_is_404(self) -> None:
        self.assertEqual(self.client.get("/nope").status_code, 404)


if __name__ == "__main__":
    unittest.main()
