from app.models.asset_log import AssetLog


class AssetLogOut(AssetLog):
    message: str
