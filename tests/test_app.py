from unittest.mock import MagicMock, patch

import pytest
from aggregation import CountrySummary, Totals
from app import DashboardView, init_logging
from pipeline import DashboardState


@pytest.fixture
def slots():
    with patch('app.st') as mock_st:
        totals_slot, map_slot = MagicMock(), MagicMock()
        mock_st.empty.side_effect = [totals_slot, map_slot]
        mock_st.tabs.return_value = [MagicMock(), MagicMock()]
        yield mock_st, totals_slot, map_slot


def make_state(countries):
    return DashboardState(
        date_label="04-2020",
        countries=countries,
        totals=Totals(sum(c.total_confirmed for c in countries.values()), 0),
        top=max(countries.values(), key=lambda c: c.total_confirmed, default=None),
    )


def test_clear_empties_both_placeholders(slots):
    mock_st, totals_slot, map_slot = slots
    view = DashboardView()

    view.clear()

    totals_slot.empty.assert_called_once()
    map_slot.empty.assert_called_once()


def test_render_empty_snapshot_warns_without_maps(slots):
    mock_st, totals_slot, map_slot = slots
    view = DashboardView()

    with patch('app.display_totals') as mock_totals, \
         patch('app.plot_world_map') as mock_plot, \
         patch('app.render_interactive_map') as mock_map, \
         patch('app.display_download_button'):
        view.render(make_state({}))

    mock_totals.assert_called_once_with(Totals(0, 0))
    mock_st.warning.assert_called_once()
    assert "04-2020" in mock_st.warning.call_args.args[0]
    assert not mock_plot.called
    assert not mock_map.called


def test_render_draws_both_maps(slots):
    mock_st, totals_slot, map_slot = slots
    view = DashboardView()
    countries = {"Italy": CountrySummary("Italy", 100, 5, 41.9, 12.6)}

    with patch('app.display_totals'), \
         patch('app.plot_world_map') as mock_plot, \
         patch('app.render_interactive_map') as mock_map, \
         patch('app.get_world_geometry', return_value=None), \
         patch('app.display_download_button') as mock_download:
        view.render(make_state(countries))

    mock_plot.assert_called_once_with(countries, countries["Italy"], "04-2020")
    mock_st.plotly_chart.assert_called_once()
    assert mock_map.call_args.args[:2] == (countries, countries["Italy"])
    mock_download.assert_called_once_with(countries, "04-2020")
    assert not mock_st.warning.called


def test_init_logging_runs_once():
    init_logging.clear()
    with patch('app.setup_logging') as mock_setup:
        init_logging()
        init_logging()
    assert mock_setup.call_count == 1
    init_logging.clear()
