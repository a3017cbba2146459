from bazarika.models.profile import Profile
from bazarika.models.category import Category
from bazarika.models.product import Product
from bazarika.models.product_image import ProductImage
from bazarika.models.address import Address
from bazarika.models.cart import Cart, CartItem
from bazarika.models.coupon import Coupon
from bazarika.models.order import Order
from bazarika.models.order_item import OrderItem
from bazarika.models.review import Review
from bazarika.models.wishlist import WishlistItem
from bazarika.models.inventory_log import InventoryLog

# add ALL models here
