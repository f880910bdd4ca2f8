from marketplace.models.user import User
from marketplace.models.seller import Seller
from marketplace.models.product import Product
from marketplace.models.order import Order
from marketplace.models.seller_order import SellerOrder
from marketplace.models.order_item import OrderItem
from marketplace.models.seller_payout import SellerPayout
from marketplace.models.seller_rating import SellerRating
from marketplace.models.order_event import OrderEvent

# add ALL models here
