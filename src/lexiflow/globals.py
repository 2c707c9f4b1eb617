from fastapi.templating import Jinja2Templates

from .config import settings
from .remote import RemoteService
from .store import ClientStore

templates = Jinja2Templates(directory=settings.TEMPLATE_DIR)
service = RemoteService(settings.API_BASE_URL, timeout=settings.API_TIMEOUT)
client_store = ClientStore(settings.SESSION_TIMEOUT_MINUTES)
