"""
Authentication Module

Loads a Kubernetes API client from kubeconfig or the in-cluster environment.
"""

import logging
from typing import Optional

from kubernetes import client, config
from kubernetes.config.config_exception import ConfigException

from ..core.constants import ErrorMessages
from ..core.exceptions import ClusterAccessError
from ..core.utils import disable_ssl_warnings

logger = logging.getLogger(__name__)


class KubernetesAuth:
    """Builds an authenticated Kubernetes API client"""

    def __init__(self, context: Optional[str] = None, skip_tls: bool = False):
        """
        Initialize Kubernetes authentication handler

        Args:
            context: kubeconfig context name, None for the current context
            skip_tls: Whether to skip TLS verification for requests
        """
        self.context = context or None
        self.skip_tls = skip_tls
        self.api_client = None

    def get_api_client(self) -> client.ApiClient:
        """
        Load configuration and return an API client

        Returns:
            Configured ApiClient

        Raises:
            ClusterAccessError: If neither kubeconfig nor in-cluster config can be loaded
        """
        if self.api_client is not None:
            return self.api_client

        configuration = client.Configuration()

        try:
            config.load_kube_config(context=self.context, client_configuration=configuration)
            logger.debug(f"Loaded kubeconfig (context: {self.context or 'current'})")
        except (ConfigException, OSError) as kubeconfig_error:
            if self.context:
                raise ClusterAccessError(
                    f"Failed to load kubeconfig context '{self.context}': {kubeconfig_error}"
                ) from kubeconfig_error

            logger.debug(f"Failed to load kubeconfig: {kubeconfig_error}")
            try:
                config.load_incluster_config(client_configuration=configuration)
                logger.debug("Loaded in-cluster config")
            except ConfigException as incluster_error:
                raise ClusterAccessError(str(ErrorMessages.ClusterError.NO_CONFIG)) from incluster_error

        if self.skip_tls:
            configuration.verify_ssl = False
            configuration.ssl_ca_cert = None
            disable_ssl_warnings()

        self.api_client = client.ApiClient(configuration)
        return self.api_client
