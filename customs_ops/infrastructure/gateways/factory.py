from customs_ops.application.interfaces.screening_gateway import ScreeningGatewaySelector
from customs_ops.config import Settings
from customs_ops.domain.value_objects.environment import Environment
from customs_ops.infrastructure.gateways.screening_gateway_http import ScreeningGatewayHTTP


def build_gateway_selector(settings: Settings) -> ScreeningGatewaySelector:
    """One HTTP gateway per environment, sharing the API key and timeout."""
    base_urls = {
        Environment.SANDBOX: settings.screening_sandbox_url,
        Environment.PRODUCTION: settings.screening_production_url,
    }
    selector = ScreeningGatewaySelector()
    for environment, base_url in base_urls.items():
        selector.register(
            environment,
            ScreeningGatewayHTTP(
                base_url=base_url,
                api_key=settings.screening_api_key or "",
                environment=environment,
                timeout_seconds=settings.screening_timeout_seconds,
            ),
        )
    return selector
