"""
ELBv2 security checks
"""

from typing import Any, Dict

from ..core.framework import CheckContext, SecurityCheck, Status


DEPRECATED_SSL_POLICIES = frozenset([
    'ELBSecurityPolicy-2015-05',
    'ELBSecurityPolicy-2015-03',
    'ELBSecurityPolicy-2015-02',
    'ELBSecurityPolicy-2014-10',
    'ELBSecurityPolicy-2014-01',
    'ELBSecurityPolicy-2011-08',
    'ELBSample-ELBDefaultCipherPolicy',
    'ELBSample-OpenSSLDefaultCipherPolicy',
])


class ELBv2DeprecatedSSLPoliciesCheck(SecurityCheck):
    """Check for ELBv2 listeners using deprecated SSL policies"""

    def __init__(self):
        super().__init__()
        self.check_id = "elbv2DeprecatedSslPolicies"
        self.check_title = "ELBv2 Deprecated SSL Policies"
        self.service = "elbv2"
        self.domain = "Content Delivery"
        self.description = "Ensures ELBv2 listeners are not using deprecated SSL policies."
        self.more_info = ("ELBv2 listeners should use current SSL policies; deprecated "
                          "policies allow weak ciphers and protocol versions.")
        self.link = ("https://docs.aws.amazon.com/elasticloadbalancing/latest/"
                     "application/create-https-listener.html")
        self.recommended_action = "Modify ELBv2 listeners with the latest predefined AWS SSL policies."
        self.apis = ['ELBv2:describeLoadBalancers', 'ELBv2:describeListeners']
        self.region_service = "elbv2"

    async def evaluate(self, ctx: CheckContext):
        await ctx.each_region(self._check_region)

    async def _check_region(self, ctx: CheckContext, region: str):
        load_balancers = ctx.listing(
            ['elbv2', 'describeLoadBalancers', region], region, 'load balancers')
        if not load_balancers:
            return

        await ctx.each(load_balancers,
                       lambda lb_ctx, lb: self._check_load_balancer(lb_ctx, region, lb))

    def _check_load_balancer(self, ctx: CheckContext, region: str, lb: Dict[str, Any]):
        lb_arn = lb.get('LoadBalancerArn')
        listeners = ctx.listing(
            ['elbv2', 'describeListeners', region, lb.get('DNSName')],
            region, 'Listeners', resource=lb_arn, report_absent=True)
        if not listeners:
            return

        # describeListeners is stored as the raw response page
        if isinstance(listeners, dict):
            listeners = listeners.get('Listeners') or []
        if not listeners:
            ctx.add_result(Status.OK, 'No Listeners found', region, lb_arn)
            return

        policies = [listener['SslPolicy'] for listener in listeners
                    if listener.get('SslPolicy')]
        if not policies:
            ctx.add_result(Status.OK, 'No SSL policies found', region, lb_arn)
            return

        deprecated = []
        for policy in policies:
            if policy in DEPRECATED_SSL_POLICIES and policy not in deprecated:
                deprecated.append(policy)

        name = lb.get('LoadBalancerName', lb_arn)
        if deprecated:
            ctx.add_result(Status.FAIL,
                           f'Elbv2 "{name}" listeners are using following deprecated policies: '
                           f'{", ".join(deprecated)}',
                           region, lb_arn)
        else:
            ctx.add_result(Status.OK,
                           f'Elbv2 "{name}" listeners are using current SSL policies',
                           region, lb_arn)
