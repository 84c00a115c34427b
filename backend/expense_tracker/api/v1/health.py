from fastapi import APIRouter

from expense_tracker.schemas.simple import Health

router = APIRouter(tags=["health"])


@router.get('/health', response_model=Health)
def health():
    return {'status': 'ok'}
