import logging

import numpy as np
import pandas as pd
import pytest

from sonargrid.contracts import ContractViolation
from sonargrid.pipeline.orchestrator import SurveyOrchestrator
from sonargrid.pipeline.processor import TransectProcessor, TransectState

pytestmark = [pytest.mark.unit, pytest.mark.pipeline]


@pytest.fixture
def survey(make_samples, make_track, flat_bathymetry):
    """Three transects: two good, one with a single track point."""
    samples = pd.concat([
        make_samples([(5, 0, 15), (5, 0, 16)], "T1"),
        make_samples([(5, 20, 12)], "T2"),
        make_samples([(-30, -30, 14)], "T3"),
    ], ignore_index=True)
    track = pd.concat([
        make_track([(0, 0), (10, 0), (20, 0)], "T1"),
        make_track([(0, 20), (10, 20)], "T2"),
        make_track([(-30, -30)], "T3"),
    ], ignore_index=True)
    return samples, track, flat_bathymetry(depth=20.0)


def test_run_merges_done_transects(survey_config, survey):
    orch = SurveyOrchestrator(survey_config)
    table = orch.run(*survey)

    states = {r.transect_id: r.state for r in orch.results}
    assert states == {"T1": TransectState.DONE, "T2": TransectState.DONE,
                      "T3": TransectState.SKIPPED}
    assert set(table["transect_id"]) == {"T1", "T2"}


def test_results_in_transect_order(survey_config, survey):
    orch = SurveyOrchestrator(survey_config)
    orch.run(*survey)

    assert [r.transect_id for r in orch.results] == ["T1", "T2", "T3"]


def test_sequential_and_parallel_agree(survey_config, survey):
    parallel = SurveyOrchestrator(survey_config).run(*survey)
    sequential_config = survey_config.model_copy(
        update={"processor": survey_config.processor.model_copy(update={"max_workers": 1})}
    )
    sequential = SurveyOrchestrator(sequential_config).run(*survey)

    pd.testing.assert_frame_equal(parallel, sequential)


def test_transect_only_in_track_is_processed(survey_config, survey, make_track):
    samples, track, bathy = survey
    track = pd.concat([track, make_track([(0, -20), (10, -20)], "T4")], ignore_index=True)

    orch = SurveyOrchestrator(survey_config)
    orch.run(samples, track, bathy)

    result = {r.transect_id: r for r in orch.results}["T4"]
    assert result.state == TransectState.SKIPPED
    assert result.reason == "no samples"


def test_failing_transect_does_not_stop_others(survey_config, survey, monkeypatch):
    original = TransectProcessor.process

    def flaky(self, transect_id, samples, track):
        if transect_id == "T2":
            raise RuntimeError("corrupt ping table")
        return original(self, transect_id, samples, track)

    monkeypatch.setattr(TransectProcessor, "process", flaky)

    orch = SurveyOrchestrator(survey_config)
    table = orch.run(*survey)

    results = {r.transect_id: r for r in orch.results}
    assert results["T2"].state == TransectState.SKIPPED
    assert results["T2"].reason == "error: corrupt ping table"
    assert results["T1"].state == TransectState.DONE
    assert set(table["transect_id"]) == {"T1"}


def test_contract_violation_aborts_run(survey_config, survey, monkeypatch):
    def broken(self, transect_id, samples, track):
        raise ContractViolation("raster contract violated")

    monkeypatch.setattr(TransectProcessor, "process", broken)

    with pytest.raises(ContractViolation):
        SurveyOrchestrator(survey_config).run(*survey)


def test_split_by_transect(survey):
    samples, track, _ = survey
    work = SurveyOrchestrator.split_by_transect(samples, track)

    assert list(work) == ["T1", "T2", "T3"]
    assert len(work["T1"][0]) == 2 and len(work["T1"][1]) == 3


def test_save_results_parquet(survey_config, survey, output_dirs):
    orch = SurveyOrchestrator(survey_config, output_dirs)
    table = orch.run(*survey)

    path = orch.save_results(table)

    assert path.name == "TEST_20240603_thickness.parquet"
    loaded = pd.read_parquet(path)
    assert len(loaded) == len(table)
    assert loaded["thickness"].dtype == "Int64"


def test_save_results_csv(make_config, survey, output_dirs):
    config = make_config(
        grid_origin=(-50, -50), grid_extent=(100, 100), track_subsample_stride=1,
        output_format="CSV", site_code="MB01",
    )
    orch = SurveyOrchestrator(config, output_dirs)

    path = orch.save_results(orch.run(*survey))

    assert path.suffix == ".csv"
    assert list(pd.read_csv(path).columns)[:3] == ["x", "y", "transect_id"]


def test_start_end_to_end(make_config, survey, output_dirs, tmp_path):
    samples, track, _ = survey
    samples.rename(columns={"depth": "Depth"}).to_csv(tmp_path / "samples.csv", index=False)
    track.to_csv(tmp_path / "track.csv", index=False)
    nodes = np.arange(-100.0, 101.0, 10.0)
    xx, yy = np.meshgrid(nodes, nodes)
    pd.DataFrame({"x": xx.ravel(), "y": yy.ravel(), "depth": -20.0}).to_csv(
        tmp_path / "bathy.csv", index=False)

    config = make_config(
        grid_origin=(-50, -50), grid_extent=(100, 100), track_subsample_stride=1,
        min_depth_threshold=10, site_code="MB01", survey_date="2024-06-03",
        samples_path=str(tmp_path / "samples.csv"),
        track_path=str(tmp_path / "track.csv"),
        bathymetry_path=str(tmp_path / "bathy.csv"),
    )

    try:
        table = SurveyOrchestrator(config, output_dirs).start()
    finally:
        root = logging.getLogger()
        for handler in root.handlers[:]:
            handler.close()
            root.removeHandler(handler)

    assert set(table["transect_id"]) == {"T1", "T2"}
    assert (output_dirs["analysis"] / "MB01_20240603_thickness.parquet").exists()
    assert (output_dirs["analysis"] / "MB01_20240603_runtime_config.json").exists()
    assert list(output_dirs["logs"].glob("pipeline_MB01_*.log"))
