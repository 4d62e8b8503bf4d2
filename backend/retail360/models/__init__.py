from .shops import Shop, ShopConnection, InterShopEntry
from .users import User, UserOwnedShop, UserShopDebt
from .ledger import CrossShopTransaction

__all__ = [
    'Shop', 'ShopConnection', 'InterShopEntry',
    'User', 'UserOwnedShop', 'UserShopDebt',
    'CrossShopTransaction',
]
