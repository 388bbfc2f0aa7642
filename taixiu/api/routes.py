from fastapi import APIRouter, Depends, HTTPException, Header, Request

from taixiu.api.schemas import IngestIn, LedgerItem, PredictOut, RecordItem, StatsOut
from taixiu.core.models import OutcomeRecord
from taixiu.services import Feed, get_current, get_history, get_ledger, get_stats

router = APIRouter()


def get_feed(request: Request) -> Feed:
    return request.app.state.feed


def _auth(request: Request, api_key_header: str | None = Header(default=None, alias="X-API-Key")):
    api_key = request.app.state.feed.settings.api_key
    if api_key and api_key_header != api_key:
        raise HTTPException(status_code=401, detail="Invalid API key")


@router.get('/')
async def root():
    return {
        'status': 'ok',
        'app': 'TaiXiu Ensemble',
        'endpoints': ['/predict', '/history', '/stats', '/ledger', '/ingest'],
    }


@router.get('/predict', response_model=PredictOut)
async def predict(feed: Feed = Depends(get_feed)):
    return get_current(feed)


@router.get('/history', response_model=list[RecordItem])
async def history(limit: int | None = None, feed: Feed = Depends(get_feed)):
    return get_history(feed, limit=limit if limit is not None else feed.settings.history_limit)


@router.get('/stats', response_model=StatsOut)
async def stats(feed: Feed = Depends(get_feed)):
    return get_stats(feed)


@router.get('/ledger', response_model=list[LedgerItem])
async def ledger(limit: int = 50, feed: Feed = Depends(get_feed)):
    return get_ledger(feed, limit=limit)


@router.post('/ingest')
async def ingest(data: IngestIn, feed: Feed = Depends(get_feed), ok=Depends(_auth)):
    if feed.current_session_id is not None and data.session <= feed.current_session_id:
        raise HTTPException(409, detail=f"session {data.session} is not newer than {feed.current_session_id}")
    r = OutcomeRecord.from_dice(data.session, data.d1, data.d2, data.d3, side=data.side)
    feed.sync([r])
    return {
        'stored_record': {
            'session': r.session, 'd1': r.d1, 'd2': r.d2, 'd3': r.d3,
            'total': r.total, 'category': r.category,
        },
        'prediction': get_current(feed),
    }
