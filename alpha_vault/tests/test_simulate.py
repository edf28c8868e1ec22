"""
Simulation CLI 테스트
"""

import pandas as pd

from ..config import VaultConfig
from ..scripts.simulate import main, run_simulation


class TestRunSimulation:

    def test_records_every_step(self):
        df = run_simulation(steps=30, seed=1, step_seconds=3600)
        assert isinstance(df, pd.DataFrame)
        assert len(df) == 30
        assert list(df["step"]) == list(range(30))
        assert df["timestamp"].is_monotonic_increasing

    def test_rebalances_respect_period(self):
        config = VaultConfig.from_settings(period=7200)
        df = run_simulation(steps=24, seed=3, step_seconds=3600, config=config)
        rebalance_times = df.loc[df["rebalanced"], "timestamp"].tolist()
        assert rebalance_times
        gaps = [b - a for a, b in zip(rebalance_times, rebalance_times[1:])]
        assert all(gap >= 7200 for gap in gaps)

    def test_deterministic(self):
        first = run_simulation(steps=20, seed=7)
        second = run_simulation(steps=20, seed=7)
        pd.testing.assert_frame_equal(first, second)

    def test_base_range_contains_tick_after_rebalance(self):
        df = run_simulation(steps=40, seed=11, config=VaultConfig.from_settings(period=3600))
        rebalanced = df[df["rebalanced"]]
        assert not rebalanced.empty
        for _, row in rebalanced.iterrows():
            assert row["base_lower"] <= row["tick"] < row["base_upper"]


class TestMain:

    def test_writes_csv(self, tmp_path):
        output = tmp_path / "result.csv"
        assert main(["--steps", "5", "--seed", "2", "--output", str(output)]) == 0
        df = pd.read_csv(output)
        assert len(df) == 5

    def test_reads_yaml_config(self, tmp_path, capsys):
        config_path = tmp_path / "vault.yaml"
        config_path.write_text("vault:\n  period: 3600\n")
        assert main(["--steps", "3", "--config", str(config_path)]) == 0
        assert "tick" in capsys.readouterr().out
