"""
Loyaltypass signals: public event API.

Emitted signals:
- user_registered: Emitted by UserService.register()
- pass_assigned: Emitted by UserService.set_pass_serial()
- visit_recorded: Emitted on commit of VisitService.record_visit()
- reward_claimed: Emitted by RewardService.claim_reward()
"""

from django.dispatch import Signal

user_registered = Signal()  # sender=LoyaltyUser, user
pass_assigned = Signal()  # sender=LoyaltyUser, user, pass_serial_number
visit_recorded = Signal()  # sender=Visit, visit, user, reward_triggered
reward_claimed = Signal()  # sender=RewardNotification, notification
