from customs_ops.application.dtos.provider import Platform
from customs_ops.application.interfaces.screening_gateway import ScreeningGatewaySelector
from customs_ops.application.provider_errors import describe_provider_error, guarded_call
from customs_ops.domain.value_objects.platforms import (
    SUPPORTED_PLATFORMS,
    SupportedPlatform,
    platforms_by_category,
)


class ListPlatformsUseCase:
    def execute(self, category: str | None = None) -> list[SupportedPlatform]:
        if category:
            return platforms_by_category(category)
        return list(SUPPORTED_PLATFORMS)


class ListRemotePlatformsUseCase:
    """Proxies the provider's own platform list for one environment."""

    def __init__(self, gateway_selector: ScreeningGatewaySelector) -> None:
        self._gateway_selector = gateway_selector

    async def execute(self, environment: str) -> tuple[list[Platform], str | None]:
        gateway = self._gateway_selector.for_environment(environment)
        result = await guarded_call(gateway.get_platforms(), operation="get_platforms")
        if not result.success:
            return [], describe_provider_error(result.error)

        data = result.data
        if isinstance(data, dict):
            data = data.get("platforms", [])
        platforms = [Platform.model_validate(item) for item in data or [] if isinstance(item, dict) and item.get("id")]
        return platforms, None
