"""Query current state (and history) from the command line; prints one page as
JSON. Repeat an option to match any of several values, e.g.
`--system Sol --system Achenar`.

Times are epoch milliseconds. `--count` overrides `--timemin` / `--timemax`.
"""

from ebgs.query import QueryError, history_mode

import json
from typing import List, Optional
import typer

app = typer.Typer()


def _opt(values):
    """Unset repeated options arrive as None or empty; filters want None.
    """
    return list(values) if values else None


def _print_page(fn):
    try:
        result = fn()
    except QueryError as e:
        raise typer.BadParameter(str(e))
    print(json.dumps(result, indent=2))


@app.command()
def factions(
        id: Optional[List[int]]=typer.Option(None),
        eddb_id: Optional[List[int]]=typer.Option(None),
        name: Optional[List[str]]=typer.Option(None),
        begins_with: Optional[str]=typer.Option(None),
        allegiance: Optional[List[str]]=typer.Option(None),
        government: Optional[List[str]]=typer.Option(None),
        system: Optional[List[str]]=typer.Option(None),
        active_state: Optional[List[str]]=typer.Option(None),
        pending_state: Optional[List[str]]=typer.Option(None),
        recovering_state: Optional[List[str]]=typer.Option(None),
        filter_system_in_history: bool=typer.Option(False),
        minimal: bool=typer.Option(False),
        system_details: bool=typer.Option(False),
        timemin: Optional[int]=typer.Option(None),
        timemax: Optional[int]=typer.Option(None),
        count: Optional[int]=typer.Option(None),
        page: int=typer.Option(1)):
    """Factions, with their presence in every system.
    """
    from ebgs.query.factions import FactionFilter, get_factions
    flt = FactionFilter(id=_opt(id), eddb_id=_opt(eddb_id), name=_opt(name),
            begins_with=begins_with, allegiance=_opt(allegiance),
            government=_opt(government), system=_opt(system),
            active_state=_opt(active_state), pending_state=_opt(pending_state),
            recovering_state=_opt(recovering_state))
    _print_page(lambda: get_factions(flt,
            history_mode(timemin, timemax, count), page=page, minimal=minimal,
            filter_system_in_history=filter_system_in_history,
            system_details=system_details))


@app.command()
def systems(
        id: Optional[List[int]]=typer.Option(None),
        eddb_id: Optional[List[int]]=typer.Option(None),
        system_address: Optional[List[int]]=typer.Option(None),
        name: Optional[List[str]]=typer.Option(None),
        begins_with: Optional[str]=typer.Option(None),
        allegiance: Optional[List[str]]=typer.Option(None),
        government: Optional[List[str]]=typer.Option(None),
        state: Optional[List[str]]=typer.Option(None),
        primary_economy: Optional[List[str]]=typer.Option(None),
        security: Optional[List[str]]=typer.Option(None),
        faction: Optional[List[str]]=typer.Option(None),
        controlling_faction: Optional[List[str]]=typer.Option(None),
        minimal: bool=typer.Option(False),
        timemin: Optional[int]=typer.Option(None),
        timemax: Optional[int]=typer.Option(None),
        count: Optional[int]=typer.Option(None),
        page: int=typer.Option(1)):
    """Systems.
    """
    from ebgs.query.systems import SystemFilter, get_systems
    flt = SystemFilter(id=_opt(id), eddb_id=_opt(eddb_id),
            system_address=_opt(system_address), name=_opt(name),
            begins_with=begins_with, allegiance=_opt(allegiance),
            government=_opt(government), state=_opt(state),
            primary_economy=_opt(primary_economy), security=_opt(security),
            faction=_opt(faction),
            controlling_faction=_opt(controlling_faction))
    _print_page(lambda: get_systems(flt, history_mode(timemin, timemax, count),
            page=page, minimal=minimal))


@app.command()
def stations(
        id: Optional[List[int]]=typer.Option(None),
        eddb_id: Optional[List[int]]=typer.Option(None),
        market_id: Optional[List[int]]=typer.Option(None),
        name: Optional[List[str]]=typer.Option(None),
        begins_with: Optional[str]=typer.Option(None),
        type: Optional[List[str]]=typer.Option(None),
        system: Optional[List[str]]=typer.Option(None),
        economy: Optional[List[str]]=typer.Option(None),
        allegiance: Optional[List[str]]=typer.Option(None),
        government: Optional[List[str]]=typer.Option(None),
        state: Optional[List[str]]=typer.Option(None),
        controlling_faction: Optional[List[str]]=typer.Option(None),
        timemin: Optional[int]=typer.Option(None),
        timemax: Optional[int]=typer.Option(None),
        count: Optional[int]=typer.Option(None),
        page: int=typer.Option(1)):
    """Stations.
    """
    from ebgs.query.stations import StationFilter, get_stations
    flt = StationFilter(id=_opt(id), eddb_id=_opt(eddb_id),
            market_id=_opt(market_id), name=_opt(name),
            begins_with=begins_with, type=_opt(type), system=_opt(system),
            economy=_opt(economy), allegiance=_opt(allegiance),
            government=_opt(government), state=_opt(state),
            controlling_faction=_opt(controlling_faction))
    _print_page(lambda: get_stations(flt, history_mode(timemin, timemax, count),
            page=page))


if __name__ == '__main__':
    app()
