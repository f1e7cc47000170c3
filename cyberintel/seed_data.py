"""Built-in sample dataset: tracked startups, investors, rounds, holdings, conventions."""

from datetime import date

COMPANIES = [
    {
        "name": "CyberShield AI", "website": "https://cybershield.ai", "country": "United States",
        "city": "San Francisco", "founded_year": 2021, "employee_range": "51-100",
        "primary_category": "AI Security",
        "description": "Machine learning threat detection for enterprise networks",
    },
    {
        "name": "QuantumSec", "website": "https://quantumsec.com", "country": "United States",
        "city": "Boston", "founded_year": 2022, "employee_range": "11-50",
        "primary_category": "Cryptography",
        "description": "Post-quantum encryption toolkit for financial institutions",
    },
    {
        "name": "ThreatLock", "website": "https://threatlock.com", "country": "Israel",
        "city": "Tel Aviv", "founded_year": 2020, "employee_range": "101-250",
        "primary_category": "Endpoint Security",
        "description": "Application allowlisting and ransomware containment for endpoints",
    },
    {
        "name": "ZeroDay Defense", "website": "https://zerodaydefense.com", "country": "United States",
        "city": "Austin", "founded_year": 2021, "employee_range": "51-100",
        "primary_category": "Vulnerability Management",
        "description": "Exploit prediction and patch prioritisation platform",
    },
    {
        "name": "CloudGuard Security", "website": "https://cloudguard.security", "country": "United Kingdom",
        "city": "London", "founded_year": 2019, "employee_range": "251-500",
        "primary_category": "Cloud Security",
        "description": "Cloud posture management and workload protection across AWS, Azure and GCP",
    },
    {
        "name": "AI Sentinel", "website": "https://aisentinel.io", "country": "Canada",
        "city": "Toronto", "founded_year": 2022, "employee_range": "11-50",
        "primary_category": "AI Security",
        "description": "Guardrails and monitoring for large language model applications",
    },
    {
        "name": "Blockchain Firewall", "website": "https://blockchainfirewall.com", "country": "Germany",
        "city": "Berlin", "founded_year": 2021, "employee_range": "51-100",
        "primary_category": "Network Security",
        "description": "Smart contract transaction firewall for web3 infrastructure",
    },
    {
        "name": "IoT Secure", "website": "https://iotsecure.com", "country": "United States",
        "city": "Seattle", "founded_year": 2020, "employee_range": "101-250",
        "primary_category": "IoT Security",
        "description": "Device identity and network segmentation for connected devices",
    },
]

# name -> investor_type
INVESTORS = {
    "Ballistic Ventures": "VC Firm",
    "Sequoia Capital": "VC Firm",
    "Accel": "VC Firm",
    "Kleiner Perkins": "VC Firm",
    "Lightspeed Venture Partners": "VC Firm",
    "Y Combinator": "Accelerator",
    "Andreessen Horowitz": "VC Firm",
    "GV (Google Ventures)": "Corporate VC",
    "Index Ventures": "VC Firm",
    "Bessemer Venture Partners": "VC Firm",
}

# (company, date, round type, amount, lead, other investors)
ROUNDS = [
    ("CyberShield AI", date(2024, 1, 15), "Series A", 25_000_000, "Ballistic Ventures", ["Kleiner Perkins"]),
    ("QuantumSec", date(2024, 1, 10), "Seed", 5_000_000, "Accel", ["Y Combinator"]),
    ("ThreatLock", date(2024, 1, 5), "Series B", 75_000_000, "Sequoia Capital", ["Lightspeed Venture Partners"]),
    ("ZeroDay Defense", date(2023, 12, 20), "Series A", 18_000_000, "Andreessen Horowitz", ["GV (Google Ventures)"]),
    ("CloudGuard Security", date(2023, 12, 15), "Series C", 120_000_000, "Index Ventures", ["Bessemer Venture Partners"]),
    ("AI Sentinel", date(2023, 12, 10), "Seed", 3_500_000, "Y Combinator", []),
    ("Blockchain Firewall", date(2023, 12, 5), "Series A", 15_000_000, "Kleiner Perkins", ["Accel"]),
    ("IoT Secure", date(2023, 11, 30), "Series B", 45_000_000, "Lightspeed Venture Partners", ["Sequoia Capital"]),
]

PORTFOLIO = [
    {
        "id": "pangea-001", "name": "Pangea",
        "description": "Application security solutions for developers with comprehensive API security platform",
        "website": "https://pangea.cloud", "founded": 2021, "headquarters": "San Francisco, CA",
        "investment_stage": "series-a", "investment_date": date(2022, 3, 15),
        "investment_amount": 15_000_000, "current_valuation": 120_000_000, "ownership_percentage": 12.5,
        "lead_investor": True, "focus_area": "application-security",
        "primary_solution": "Developer-first security APIs and services", "target_market": "developer",
        "current_employees": 45, "employee_growth": 125.0, "revenue_growth": 180.0, "customer_count": 250,
        "arr": 8_500_000, "burn_rate": 850_000, "runway": 18, "market_traction": 72,
        "competitive_position": "challenger", "patent_count": 3, "risk_level": "medium",
        "risk_factors": "Market competition; Developer adoption rate",
        "exit_probability": 0.75, "estimated_exit_value": 500_000_000, "exit_timeframe": "2-3 years",
        "potential_acquirers": "Okta, Auth0, Cloudflare",
        "market_trend": "growing", "investment_recommendation": "buy", "confidence_score": 0.85,
    },
    {
        "id": "concentric-002", "name": "Concentric Inc.",
        "description": "Intelligent AI solutions for protecting business-critical data with autonomous data security",
        "website": "https://concentric.ai", "founded": 2018, "headquarters": "San Jose, CA",
        "investment_stage": "series-b", "investment_date": date(2021, 8, 10),
        "investment_amount": 25_000_000, "current_valuation": 200_000_000, "ownership_percentage": 15.0,
        "lead_investor": False, "focus_area": "data-protection",
        "primary_solution": "AI-powered data discovery and protection platform", "target_market": "enterprise",
        "current_employees": 78, "employee_growth": 95.0, "revenue_growth": 220.0, "customer_count": 85,
        "arr": 18_500_000, "burn_rate": 1_200_000, "runway": 24, "market_traction": 85,
        "competitive_position": "leader", "patent_count": 12, "risk_level": "low",
        "risk_factors": "Regulatory changes",
        "exit_probability": 0.85, "estimated_exit_value": 800_000_000, "exit_timeframe": "18-24 months",
        "potential_acquirers": "Microsoft, Palo Alto Networks, CrowdStrike",
        "market_trend": "growing", "investment_recommendation": "strong_buy", "confidence_score": 0.92,
    },
    {
        "id": "nudge-003", "name": "Nudge Security",
        "description": "Securing organizations through the power of the modern workforce with behavioral security",
        "website": "https://nudgesecurity.com", "founded": 2020, "headquarters": "Austin, TX",
        "investment_stage": "series-a", "investment_date": date(2022, 11, 20),
        "investment_amount": 18_000_000, "current_valuation": 95_000_000, "ownership_percentage": 18.9,
        "lead_investor": True, "focus_area": "workforce-security",
        "primary_solution": "Human-centric security platform with behavioral analytics", "target_market": "enterprise",
        "current_employees": 32, "employee_growth": 78.0, "revenue_growth": 145.0, "customer_count": 120,
        "arr": 6_200_000, "burn_rate": 650_000, "runway": 20, "market_traction": 64,
        "competitive_position": "niche", "patent_count": 2, "risk_level": "medium",
        "risk_factors": "SaaS sprawl market maturity; Enterprise sales cycle",
        "exit_probability": 0.65, "estimated_exit_value": 350_000_000, "exit_timeframe": "3-4 years",
        "potential_acquirers": "Zscaler, Okta",
        "market_trend": "growing", "investment_recommendation": "buy", "confidence_score": 0.78,
    },
    {
        "id": "veza-004", "name": "Veza Inc.",
        "description": "Data security platform built on the power of authorization with identity security mesh",
        "website": "https://veza.com", "founded": 2020, "headquarters": "Redwood City, CA",
        "investment_stage": "series-b", "investment_date": date(2022, 4, 15),
        "investment_amount": 110_000_000, "current_valuation": 1_200_000_000, "ownership_percentage": 9.2,
        "lead_investor": False, "focus_area": "authorization",
        "primary_solution": "Identity security and access analytics platform", "target_market": "enterprise",
        "current_employees": 185, "employee_growth": 150.0, "revenue_growth": 280.0, "customer_count": 145,
        "arr": 45_000_000, "burn_rate": 3_500_000, "runway": 30, "market_traction": 90,
        "competitive_position": "leader", "patent_count": 8, "risk_level": "low",
        "risk_factors": "Valuation pressure",
        "exit_probability": 0.90, "estimated_exit_value": 3_000_000_000, "exit_timeframe": "12-18 months",
        "potential_acquirers": "Microsoft, Okta, SailPoint",
        "market_trend": "growing", "investment_recommendation": "strong_buy", "confidence_score": 0.95,
    },
    {
        "id": "reach-005", "name": "Reach Security",
        "description": "Modern security awareness and training platform with behavioral change focus",
        "website": "https://reachsecurity.com", "founded": 2022, "headquarters": "Boston, MA",
        "investment_stage": "seed", "investment_date": date(2023, 9, 10),
        "investment_amount": 8_500_000, "current_valuation": 45_000_000, "ownership_percentage": 18.9,
        "lead_investor": True, "focus_area": "workforce-security",
        "primary_solution": "Next-generation security awareness training platform", "target_market": "enterprise",
        "current_employees": 22, "employee_growth": 120.0, "revenue_growth": 95.0, "customer_count": 65,
        "arr": 2_800_000, "burn_rate": 420_000, "runway": 16, "market_traction": 48,
        "competitive_position": "challenger", "patent_count": 1, "risk_level": "medium",
        "risk_factors": "Crowded training market; Early revenue",
        "exit_probability": 0.55, "estimated_exit_value": 200_000_000, "exit_timeframe": "4-5 years",
        "potential_acquirers": "KnowBe4, Proofpoint",
        "market_trend": "growing", "investment_recommendation": "hold", "confidence_score": 0.72,
    },
]

CONVENTIONS = [
    {
        "name": "RSA Conference 2024", "location": "San Francisco, CA",
        "start_date": date(2024, 4, 29), "end_date": date(2024, 5, 2), "is_active": True,
        "companies": [
            {
                "company_name": "SecureNexus AI", "booth": "A123", "website": "https://securenexus.ai",
                "description": "AI-powered threat intelligence platform for enterprise security teams",
                "category": "Threat Intelligence", "funding_stage": "seed",
                "overall_fit_score": 80, "status": "prospect",
                "notes": "Real-time threat detection demo with 85% accuracy",
            },
            {
                "company_name": "ZeroTrust Dynamics", "booth": "B456", "website": "https://zerotrustdynamics.com",
                "description": "Zero-trust architecture for cloud-native applications",
                "category": "Identity Security", "funding_stage": "pre-seed",
                "overall_fit_score": 75, "status": "contacted",
                "notes": "Founding team from large-cloud security groups",
            },
        ],
    },
    {
        "name": "Black Hat USA 2024", "location": "Las Vegas, NV",
        "start_date": date(2024, 8, 3), "end_date": date(2024, 8, 8), "is_active": True,
        "companies": [
            {
                "company_name": "QuantumCrypt Labs", "booth": "C789", "website": "https://quantumcryptlabs.com",
                "description": "Post-quantum encryption for financial institutions",
                "category": "Quantum Security", "funding_stage": "seed",
                "overall_fit_score": 85, "status": "meeting",
                "notes": "Three patents filed on quantum-resistant algorithms",
            },
            {
                "company_name": "CloudArmor Systems", "booth": "D012", "website": "https://cloudarmor.systems",
                "description": "Cloud security posture management with automated remediation",
                "category": "Cloud Security", "funding_stage": "series-a",
                "overall_fit_score": 88, "status": "due_diligence",
                "notes": "15 enterprise customers, 2 in the Fortune 500",
            },
        ],
    },
    {
        "name": "DEF CON 32", "location": "Las Vegas, NV",
        "start_date": date(2024, 8, 8), "end_date": date(2024, 8, 11), "is_active": True,
        "companies": [
            {
                "company_name": "ThreatFlow Analytics", "booth": "E345", "website": "https://threatflow.io",
                "description": "Open-source threat intelligence with community data sharing",
                "category": "Threat Detection", "funding_stage": "pre-seed",
                "overall_fit_score": 72, "status": "prospect",
                "notes": "2,000+ contributors on GitHub",
            },
            {
                "company_name": "IoT Secure Gateway", "booth": "F678",
                "description": "Hardware-based security for IoT devices and edge computing",
                "category": "IoT Security", "funding_stage": "seed",
                "overall_fit_score": 78, "status": "prospect",
                "notes": "Proprietary hardware design",
            },
        ],
    },
]
