"""Rewardman services.

Each service owns one part of the voucher lifecycle:
- ledger: LedgerService (transactions and balances)
- issuer: IssuerService (credits into vouchers)
- presentation: PresentationService (short-lived codes)
- redemption: RedemptionService (consume a code at the till)
- reconciliation: ReconciliationService (bill export matching)
- merchant: MerchantService (settings and onboarding)

Contrib services are in their respective modules:
- rewardman.contrib.activity: ActivityService
"""
