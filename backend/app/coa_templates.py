CANONICAL_CATEGORIES = [
    {
        "name": "Revenue",
        "canonical_type": "revenue",
        "examples": [
            "Income",
            "Sales",
            "Service Revenue",
            "Product Revenue",
            "Consulting Revenue",
            "Subscription Revenue",
            "Other Income",
            "Sales of Product Income",
            "Service/Fee Income",
            "Unapplied Cash Payment Income",
        ],
    },
    {
        "name": "Cost of Goods Sold",
        "canonical_type": "cogs",
        "examples": [
            "COGS",
            "Cost of Sales",
            "Direct Costs",
            "Cost of Goods Sold",
            "Job Expenses",
            "Job Materials",
            "Subcontractors",
            "Supplies & Materials - COGS",
            "Direct Labor",
            "Freight & Delivery - COGS",
        ],
    },
    {
        "name": "Operating Expenses",
        "canonical_type": "opex",
        "examples": [
            "Rent",
            "Salaries",
            "Wages",
            "Marketing",
            "Advertising",
            "Utilities",
            "Office Supplies",
            "Insurance",
            "Professional Fees",
            "Legal & Professional Fees",
            "Accounting",
            "Bank Charges",
            "Depreciation",
            "Meals & Entertainment",
            "Travel",
            "Telephone",
            "Internet",
            "Software",
            "Subscriptions",
            "Repairs & Maintenance",
            "Taxes & Licenses",
            "Payroll Expenses",
            "Employee Benefits",
            "Office Expenses",
            "Miscellaneous",
        ],
    },
    {
        "name": "Assets",
        "canonical_type": "asset",
        "examples": [
            "Cash",
            "Bank",
            "Checking",
            "Savings",
            "Accounts Receivable",
            "A/R",
            "Inventory",
            "Inventory Asset",
            "Prepaid Expenses",
            "Fixed Assets",
            "Equipment",
            "Furniture & Fixtures",
            "Vehicles",
            "Buildings",
            "Land",
            "Accumulated Depreciation",
            "Other Current Assets",
            "Other Assets",
            "Undeposited Funds",
        ],
    },
    {
        "name": "Liabilities",
        "canonical_type": "liability",
        "examples": [
            "Accounts Payable",
            "A/P",
            "Credit Card",
            "Credit Cards",
            "Loans Payable",
            "Notes Payable",
            "Line of Credit",
            "Payroll Liabilities",
            "Sales Tax Payable",
            "Accrued Expenses",
            "Other Current Liabilities",
            "Long Term Liabilities",
            "Mortgage Payable",
        ],
    },
    {
        "name": "Equity",
        "canonical_type": "equity",
        "examples": [
            "Owner Equity",
            "Owners Equity",
            "Retained Earnings",
            "Opening Balance Equity",
            "Capital Stock",
            "Common Stock",
            "Paid-In Capital",
            "Distributions",
            "Dividends Paid",
            "Partner Equity",
            "Member Equity",
        ],
    },
]
