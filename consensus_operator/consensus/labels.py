from .models import ComponentKey


ROLE_LABEL_KEY = "consensus.apps.io/role"
ACCESS_MODE_LABEL_KEY = "consensus.apps.io/access-mode"

INSTANCE_LABEL_KEY = "app.kubernetes.io/instance"
COMPONENT_LABEL_KEY = "apps.consensus.io/component-name"
CONFIG_TYPE_LABEL_KEY = "apps.consensus.io/config-type"

# Config records of this type are mounted into replicas as environment
CONFIG_TYPE_ENV = "consensus-env"


def component_config_selector(key: ComponentKey) -> dict[str, str]:
    """Labels identifying the env config records of one component."""
    return {
        INSTANCE_LABEL_KEY: key.cluster,
        COMPONENT_LABEL_KEY: key.component,
        CONFIG_TYPE_LABEL_KEY: CONFIG_TYPE_ENV,
    }
