"""
LTI 1.1 launch parameter carrier shared by tool providers and tool consumers.

Launch parameters arrive as a flat form-encoded mapping. Standard parameters
are kept as launch data, ``custom_`` and ``ext_`` prefixed parameters are
split into their own mappings (stored without the prefix) and everything else
is retained as non-spec data so a round trip through ``to_params`` is lossless.

Copyright (c) 2025 Chronos Algorithmic Observatory
Licensed under MIT License
"""

from __future__ import annotations

from typing import Any, Dict, Final, Mapping, Optional, Tuple


CUSTOM_PREFIX: Final[str] = "custom_"
EXT_PREFIX: Final[str] = "ext_"

LAUNCH_DATA_PARAMETERS: Final[Tuple[str, ...]] = (
    "context_id",
    "context_label",
    "context_title",
    "context_type",
    "launch_presentation_document_target",
    "launch_presentation_locale",
    "launch_presentation_return_url",
    "lis_outcome_service_url",
    "lis_person_contact_email_primary",
    "lis_person_name_family",
    "lis_person_name_full",
    "lis_person_name_given",
    "lis_person_sourcedid",
    "lis_result_sourcedid",
    "lti_message_type",
    "lti_version",
    "resource_link_description",
    "resource_link_id",
    "resource_link_title",
    "roles",
    "tool_consumer_instance_guid",
    "tool_consumer_info_product_family_code",
    "user_id",
)


class LaunchParams:
    """
    Container for the parameters of a single LTI launch.

    Extension parameters (``ext_*``) are where optional capabilities such as
    the outcome data advertisement live; they are read and written through
    ``get_ext_param`` / ``set_ext_param`` without the prefix.
    """

    def __init__(self, params: Optional[Mapping[str, Any]] = None):
        self.launch_data: Dict[str, str] = {}
        self.custom_params: Dict[str, str] = {}
        self.ext_params: Dict[str, str] = {}
        self.non_spec_params: Dict[str, str] = {}

        if params:
            self.process_params(params)

    def process_params(self, params: Mapping[str, Any]) -> None:
        """
        Sort raw launch parameters into launch, custom, extension and
        non-spec buckets.

        Args:
            params: Flat mapping of launch parameter names to values
        """
        for key, value in params.items():
            if value is None:
                continue
            value = str(value)
            if key in LAUNCH_DATA_PARAMETERS:
                self.launch_data[key] = value
            elif key.startswith(CUSTOM_PREFIX):
                self.custom_params[key[len(CUSTOM_PREFIX):]] = value
            elif key.startswith(EXT_PREFIX):
                self.ext_params[key[len(EXT_PREFIX):]] = value
            else:
                self.non_spec_params[key] = value

    def to_params(self) -> Dict[str, str]:
        """
        Flatten the buckets back into launch parameters.

        Returns:
            Dictionary suitable for form-encoding into a launch request
        """
        params: Dict[str, str] = dict(self.non_spec_params)
        params.update(self.launch_data)
        params.update({f"{CUSTOM_PREFIX}{k}": v for k, v in self.custom_params.items()})
        params.update({f"{EXT_PREFIX}{k}": v for k, v in self.ext_params.items()})
        return params

    def get_launch_param(self, name: str) -> Optional[str]:
        return self.launch_data.get(name)

    def set_launch_param(self, name: str, value: Optional[str]) -> None:
        if value is None:
            self.launch_data.pop(name, None)
        else:
            self.launch_data[name] = str(value)

    def get_custom_param(self, name: str) -> Optional[str]:
        return self.custom_params.get(name)

    def set_custom_param(self, name: str, value: str) -> None:
        self.custom_params[name] = str(value)

    def get_ext_param(self, name: str) -> Optional[str]:
        return self.ext_params.get(name)

    def set_ext_param(self, name: str, value: str) -> None:
        self.ext_params[name] = str(value)

    def get_non_spec_param(self, name: str) -> Optional[str]:
        return self.non_spec_params.get(name)

    @property
    def lis_outcome_service_url(self) -> Optional[str]:
        return self.get_launch_param("lis_outcome_service_url")

    @lis_outcome_service_url.setter
    def lis_outcome_service_url(self, value: Optional[str]) -> None:
        self.set_launch_param("lis_outcome_service_url", value)

    @property
    def lis_result_sourcedid(self) -> Optional[str]:
        return self.get_launch_param("lis_result_sourcedid")

    @lis_result_sourcedid.setter
    def lis_result_sourcedid(self, value: Optional[str]) -> None:
        self.set_launch_param("lis_result_sourcedid", value)

    @property
    def user_id(self) -> Optional[str]:
        return self.get_launch_param("user_id")


__all__ = ["LaunchParams", "LAUNCH_DATA_PARAMETERS", "CUSTOM_PREFIX", "EXT_PREFIX"]
