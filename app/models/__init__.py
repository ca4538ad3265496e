from app.models.user import User
from app.models.profile import Profile
from app.models.user_role import UserRole
from app.models.product import Product
from app.models.order import Order
from app.models.order_item import OrderItem
from app.models.generated_image import GeneratedImage
from app.models.reference_image import ReferenceImage
from app.models.training_data import TrainingData
from app.models.notifications import Notification
from app.models.chat_history import ChatHistory

# add ALL models here
