from azarch.model.types import Layer

CAF_STYLE_TOKENS = {
    "platform": "#0078d4",
    "landingZone": "#107c10",
    "connectivity": "#d13438",
    "identity": "#8661c5",
    "management": "#ff8c00",
    "data": "#00bcf2",
    "security": "#68217a",
    "compute": "#00b294",
    "storage": "#ff6b35",
    "networking": "#0078d4",
    "observability": "#68217a",
}

SUBSCRIPTION_COLOR_MAP = {
    "platform-identity": CAF_STYLE_TOKENS["identity"],
    "platform-management": CAF_STYLE_TOKENS["management"],
    "platform-connectivity": CAF_STYLE_TOKENS["connectivity"],
    "landingzone-prod": CAF_STYLE_TOKENS["landingZone"],
    "landingzone-nonprod": CAF_STYLE_TOKENS["landingZone"],
    "platform-data": CAF_STYLE_TOKENS["data"],
}

SERVICE_COLOR_MAP = {
    "vm": CAF_STYLE_TOKENS["compute"],
    "vmss": CAF_STYLE_TOKENS["compute"],
    "sql": CAF_STYLE_TOKENS["storage"],
    "storage": CAF_STYLE_TOKENS["storage"],
    "keyvault": CAF_STYLE_TOKENS["security"],
    "monitor": CAF_STYLE_TOKENS["observability"],
    "firewall": CAF_STYLE_TOKENS["networking"],
    "bastion": CAF_STYLE_TOKENS["networking"],
    "appgw": CAF_STYLE_TOKENS["networking"],
    "lb": CAF_STYLE_TOKENS["networking"],
    "nsg": CAF_STYLE_TOKENS["networking"],
}

LAYER_COLORS = {
    Layer.CONNECTIVITY: CAF_STYLE_TOKENS["connectivity"],
    Layer.NETWORKING: CAF_STYLE_TOKENS["networking"],
    Layer.COMPUTE: CAF_STYLE_TOKENS["compute"],
    Layer.DATA: CAF_STYLE_TOKENS["data"],
    Layer.SECURITY: CAF_STYLE_TOKENS["security"],
    Layer.IDENTITY: CAF_STYLE_TOKENS["identity"],
    Layer.MANAGEMENT: CAF_STYLE_TOKENS["management"],
    Layer.OBSERVABILITY: CAF_STYLE_TOKENS["observability"],
    Layer.DEVOPS: CAF_STYLE_TOKENS["platform"],
}

DEFAULT_COLOR = CAF_STYLE_TOKENS["platform"]


def subscription_color(subscription_type) -> str:
    key = getattr(subscription_type, "value", subscription_type)
    return SUBSCRIPTION_COLOR_MAP.get(key, DEFAULT_COLOR)


def service_color(service_type: str) -> str:
    return SERVICE_COLOR_MAP.get(service_type, DEFAULT_COLOR)
