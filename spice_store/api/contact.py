from fastapi import APIRouter, Depends

from spice_store.api.deps import get_dispatcher
from spice_store.models.schemas import ContactMessage

router = APIRouter()


@router.post("")
async def send_contact_message(msg: ContactMessage, dispatcher=Depends(get_dispatcher)):
    return await dispatcher.send_contact_message(msg)
