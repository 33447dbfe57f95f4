"""Dry-run rendering of an apply document."""

from __future__ import annotations

from dataclasses import dataclass, field

from certfix_cli.apply.models import ConfigurationDocument


@dataclass
class ApplyPlan:
    lines: list[str] = field(default_factory=list)
    total: int = 0

    def render(self) -> str:
        return "\n".join([*self.lines, f"Total resources: {self.total}"])


def build_plan(document: ConfigurationDocument) -> ApplyPlan:
    """Describe what each phase would create. Makes no remote calls."""
    lines: list[str] = []

    if document.events:
        lines.append("Events to create:")
        for event in document.events:
            lines.append(f"  + {event.name} (severity: {event.severity}, enabled: {event.enabled})")
        lines.append("")

    if document.policies:
        lines.append("Policies to create:")
        for policy in document.policies:
            lines.append(
                f"  + {policy.name} (strategy: {policy.strategy}, enabled: {policy.enabled})"
            )
            if policy.cron_config:
                lines.append(f"      Cron: {policy.cron_config}")
            if policy.event_config:
                lines.append(f"      Event Config: {policy.event_config}")
        lines.append("")

    if document.service_groups:
        lines.append("Service Groups to create:")
        for group in document.service_groups:
            description = group.description or "(no description)"
            lines.append(f"  + {group.name} - {description} (enabled: {group.enabled})")
        lines.append("")

    if document.services:
        lines.append("Services to create:")
        for service in document.services:
            lines.append(f"  + {service.name} (hash: {service.hash or '(assigned by server)'})")
            if service.group_name:
                lines.append(f"      Group: {service.group_name}")
            if service.policy_name:
                lines.append(f"      Policy: {service.policy_name}")
            if service.webhook_url:
                lines.append(f"      Webhook: {service.webhook_url}")
            if service.keys:
                lines.append(f"      Keys: {len(service.keys)}")
                for key in service.keys:
                    expiration = (
                        f"{key.expiration_days} days" if key.expiration_days else "never"
                    )
                    lines.append(f"        - {key.name} (expiration: {expiration})")
            if service.relations:
                lines.append(f"      Relations: {len(service.relations)}")
                for relation in service.relations:
                    lines.append(
                        f"        - {relation.target_hash} (type: {relation.type or 'default'})"
                    )
        lines.append("")

    return ApplyPlan(lines=lines, total=document.resource_count)
