"""
IAM security checks
"""

from ..core.config import GLOBAL_REGION
from ..core.framework import CheckContext, SecurityCheck, Status


class IAMUsersHasTagsCheck(SecurityCheck):
    """Check that IAM users carry at least one tag"""

    def __init__(self):
        super().__init__()
        self.check_id = "iamUsersHasTags"
        self.check_title = "IAM Users Has Tags"
        self.service = "iam"
        self.domain = "Identity and Access management"
        self.description = "Ensure IAM users have tags"
        self.more_info = ("Tags help you to group resources together that are related to or "
                          "associated with each other. It is a best practice to tag cloud "
                          "resources to better organize and gain visibility into their usage.")
        self.link = "https://docs.aws.amazon.com/IAM/latest/UserGuide/id_tags_users.html"
        self.recommended_action = "Modify IAM User and add tags"
        self.apis = ['IAM:listUsers']
        self.region_service = "iam"

    async def evaluate(self, ctx: CheckContext):
        # IAM is global; the listing is collected under the default region
        users = ctx.listing(['iam', 'listUsers', ctx.default_region], GLOBAL_REGION, 'users')
        if not users:
            return

        for user in users:
            if user.get('Tags'):
                ctx.add_result(Status.OK, 'IAM User has Tag specified', GLOBAL_REGION, user.get('Arn'))
            else:
                ctx.add_result(Status.FAIL, 'IAM User has no Tag', GLOBAL_REGION, user.get('Arn'))
