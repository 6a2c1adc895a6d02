"""View API: market filter and sort order shared by every client of this process."""

from fastapi import APIRouter, Depends

from ledger.api.deps import get_view_store
from ledger.models.trade import Market
from ledger.schemas.trade import ViewStateRead
from ledger.services.view_state import SortKey, ViewStore, select_market, toggle_sort

router = APIRouter(prefix="/api/view", tags=["view"])


@router.get("", response_model=ViewStateRead)
def get_view(view: ViewStore = Depends(get_view_store)):
    return ViewStateRead.from_state(view.state)


@router.post("/market/{market}", response_model=ViewStateRead)
def choose_market(market: Market, view: ViewStore = Depends(get_view_store)):
    return ViewStateRead.from_state(view.dispatch(select_market, market))


@router.post("/sort/{key}", response_model=ViewStateRead)
def click_sort(key: SortKey, view: ViewStore = Depends(get_view_store)):
    """Same key flips the direction; a new key starts descending."""
    return ViewStateRead.from_state(view.dispatch(toggle_sort, key))
