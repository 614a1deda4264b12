"""Static mapping tables for the OECD and IMF integrations.

These tables are the only source of non-World-Bank mapping data; the
registry upserts them verbatim and never derives new codes from them.
"""

from collections import namedtuple

DataSourceInfo = namedtuple(
    "DataSourceInfo",
    ["source_code", "source_name", "description", "base_url",
     "update_frequency", "data_quality_score"],
)

DATA_SOURCES = [
    DataSourceInfo(
        "WB",
        "World Bank",
        "World Development Indicators - annual country-level development data",
        "https://api.worldbank.org/v2/",
        "Annual",
        5,
    ),
    DataSourceInfo(
        "OECD",
        "OECD",
        "OECD Main Science and Technology Indicators (MSTI)",
        "https://sdmx.oecd.org/public/rest/",
        "Quarterly",
        4,
    ),
    DataSourceInfo(
        "IMF",
        "International Monetary Fund",
        "IMF World Economic Outlook Database - biannual macroeconomic projections",
        "https://www.imf.org/en/Publications/WEO/weo-database/",
        "Biannual",
        4,
    ),
]

OecdIndicator = namedtuple(
    "OecdIndicator", ["name", "description", "wb_equivalent", "priority"]
)

# industry -> OECD MSTI measure code -> indicator definition
OECD_INDICATOR_MAPPINGS = {
    "innovation": {
        "B": OecdIndicator(
            "Business R&D Expenditure (BERD)",
            "Business Enterprise Expenditure on R&D",
            "GB.XPD.RSDV.GD.ZS", 1),
        "GV": OecdIndicator(
            "Government R&D Expenditure (GOVERD)",
            "Government Intramural Expenditure on R&D",
            "GB.XPD.RSDV.GD.ZS", 1),
        "PT_GERD": OecdIndicator(
            "Total R&D Expenditure (% of GDP)",
            "Percentage of gross domestic expenditure on R&D",
            "GB.XPD.RSDV.GD.ZS", 1),
        "PT_BERD": OecdIndicator(
            "Business R&D (% of total)",
            "Percentage of business enterprise expenditure on R&D",
            "GB.XPD.RSDV.GD.ZS", 1),
        "PT_GOVERD": OecdIndicator(
            "Government R&D (% of total)",
            "Percentage of government intramural expenditure on R&D",
            "GB.XPD.RSDV.GD.ZS", 1),
        "PT_HERD": OecdIndicator(
            "Higher Education R&D (% of total)",
            "Percentage of higher education expenditure on R&D",
            "GB.XPD.RSDV.GD.ZS", 1),
        "B_FB": OecdIndicator(
            "Business R&D Financed by Business",
            "BERD financed by the business sector",
            "GB.XPD.RSDV.GD.ZS", 2),
        "B_FG": OecdIndicator(
            "Business R&D Financed by Government",
            "BERD financed by government",
            "GB.XPD.RSDV.GD.ZS", 2),
        "B_FA": OecdIndicator(
            "Business R&D Financed by Foreign Sources",
            "BERD financed by the rest of the world",
            "GB.XPD.RSDV.GD.ZS", 2),
        "G_FG": OecdIndicator(
            "Total R&D Financed by Government",
            "GERD financed by government",
            "GB.XPD.RSDV.GD.ZS", 2),
        "G_FA": OecdIndicator(
            "Total R&D Financed by Foreign Sources",
            "GERD financed by the rest of the world",
            "GB.XPD.RSDV.GD.ZS", 2),
        "PT_GBARD": OecdIndicator(
            "Government R&D Budget Allocation",
            "Percentage of government allocations for R&D",
            "GB.XPD.RSDV.GD.ZS", 2),
    },
    "ict": {
        "P_ICTPCT": OecdIndicator(
            "ICT Patents (PCT Applications)",
            "Patents in the ICT sector - applications filed under the PCT",
            "IP.PAT.RESD", 1),
        "TD_ECOMP": OecdIndicator(
            "Computer & Electronics Exports",
            "Export of computer, electronic and optical industry",
            "TX.VAL.TECH.CD", 1),
    },
    "biotech": {
        "P_BIOPCT": OecdIndicator(
            "Biotechnology Patents (PCT Applications)",
            "Patents in the biotechnology sector - applications filed under the PCT",
            "IP.PAT.RESD", 1),
        "TD_EDRUG": OecdIndicator(
            "Pharmaceutical Exports",
            "Export of pharmaceutical industry",
            "TX.VAL.TECH.CD", 1),
        "C_HEA": OecdIndicator(
            "Government Health R&D Budget",
            "Civil GBARD for Health and Environment programmes",
            "SH.XPD.CHEX.GD.ZS", 1),
    },
    "medtech": {
        "C_HEA": OecdIndicator(
            "Government Health R&D Budget",
            "Civil GBARD for Health and Environment programmes",
            "SH.XPD.CHEX.GD.ZS", 1),
        "TD_EDRUG": OecdIndicator(
            "Pharmaceutical Exports",
            "Export of pharmaceutical industry",
            "TX.VAL.TECH.CD", 1),
    },
    "mem": {
        "B_AERO": OecdIndicator(
            "Aerospace R&D",
            "BERD performed in the aerospace industry",
            "TX.VAL.TECH.CD", 1),
        "TD_EAERO": OecdIndicator(
            "Aerospace Exports",
            "Export of aerospace industry",
            "TX.VAL.TECH.CD", 1),
    },
    "energy": {
        "C_ECO": OecdIndicator(
            "Government Economic Development R&D",
            "Civil GBARD for Economic Development programmes",
            "EG.ELC.ACCS.ZS", 2),
    },
    "climate": {
        "C_HEA": OecdIndicator(
            "Government Health & Environment R&D",
            "Civil GBARD for Health and Environment programmes",
            "EN.ATM.CO2E.PC", 2),
    },
    "finance": {
        "B_FB": OecdIndicator(
            "Business R&D Self-Financing",
            "BERD financed by the business sector",
            "FS.AST.PRVT.GD.ZS", 2),
        "B_FG": OecdIndicator(
            "Government R&D Financing",
            "BERD financed by government",
            "FS.AST.PRVT.GD.ZS", 2),
        "B_FA": OecdIndicator(
            "Foreign R&D Investment",
            "BERD financed by the rest of the world",
            "BX.KLT.DINV.WD.GD.ZS", 2),
    },
    "trade": {
        "TD_ECOMP": OecdIndicator(
            "Computer & Electronics Exports",
            "Export of computer, electronic and optical industry",
            "TX.VAL.TECH.CD", 1),
        "TD_EAERO": OecdIndicator(
            "Aerospace Exports",
            "Export of aerospace industry",
            "TX.VAL.TECH.CD", 1),
        "TD_EDRUG": OecdIndicator(
            "Pharmaceutical Exports",
            "Export of pharmaceutical industry",
            "TX.VAL.TECH.CD", 1),
    },
    "context": {
        "PPP": OecdIndicator(
            "Purchasing Power Parity",
            "Purchasing power parity for international comparisons",
            "NY.GDP.PCAP.PP.KD", 2),
        "XDC_USD": OecdIndicator(
            "Exchange Rate (National Currency per USD)",
            "National currency per US dollar",
            "PA.NUS.FCRF", 2),
        "PT_B1GQ": OecdIndicator(
            "Innovation Intensity (% of GDP)",
            "Percentage of GDP spent on innovation activities",
            "NY.GDP.MKTP.KD.ZG", 2),
    },
}

# OECD reference areas are ISO alpha-3, identical to World Bank codes
OECD_MEMBER_CODES = [
    "AUS", "AUT", "BEL", "CAN", "CHL", "COL", "CRI", "CZE", "DNK", "EST",
    "FIN", "FRA", "DEU", "GRC", "HUN", "ISL", "IRL", "ISR", "ITA", "JPN",
    "KOR", "LVA", "LTU", "LUX", "MEX", "NLD", "NZL", "NOR", "POL", "PRT",
    "SVK", "SVN", "ESP", "SWE", "CHE", "TUR", "GBR", "USA",
]
OECD_PARTNER_CODES = ["ARG", "BGR", "CHN", "HRV", "ROU", "RUS", "SGP", "ZAF", "TWN"]
OECD_COUNTRY_CODES = OECD_MEMBER_CODES + OECD_PARTNER_CODES

ImfCountry = namedtuple("ImfCountry", ["iso", "name", "wb_code"])

# WEO country code -> (IMF ISO code, name, World Bank code)
_IMF_COUNTRY_ROWS = {
    "111": ("USA", "United States", "USA"),
    "924": ("CHN", "China", "CHN"),
    "158": ("JPN", "Japan", "JPN"),
    "134": ("DEU", "Germany", "DEU"),
    "112": ("GBR", "United Kingdom", "GBR"),
    "132": ("FRA", "France", "FRA"),
    "534": ("IND", "India", "IND"),
    "136": ("ITA", "Italy", "ITA"),
    "223": ("BRA", "Brazil", "BRA"),
    "156": ("CAN", "Canada", "CAN"),
    "542": ("KOR", "Korea", "KOR"),
    "922": ("RUS", "Russia", "RUS"),
    "184": ("ESP", "Spain", "ESP"),
    "193": ("AUS", "Australia", "AUS"),
    "273": ("MEX", "Mexico", "MEX"),
    "536": ("IDN", "Indonesia", "IDN"),
    "138": ("NLD", "Netherlands", "NLD"),
    "456": ("SAU", "Saudi Arabia", "SAU"),
    "186": ("TUR", "Turkey", "TUR"),
    "146": ("CHE", "Switzerland", "CHE"),
    "528": ("TWN", "Taiwan Province of China", "TWN"),
    "124": ("BEL", "Belgium", "BEL"),
    "213": ("ARG", "Argentina", "ARG"),
    "178": ("IRL", "Ireland", "IRL"),
    "436": ("ISR", "Israel", "ISR"),
    "142": ("NOR", "Norway", "NOR"),
    "122": ("AUT", "Austria", "AUT"),
    "196": ("NZL", "New Zealand", "NZL"),
    "199": ("ZAF", "South Africa", "ZAF"),
    "566": ("PHL", "Philippines", "PHL"),
    "576": ("SGP", "Singapore", "SGP"),
    "578": ("THA", "Thailand", "THA"),
    "548": ("MYS", "Malaysia", "MYS"),
    "582": ("VNM", "Vietnam", "VNM"),
    "228": ("CHL", "Chile", "CHL"),
    "172": ("FIN", "Finland", "FIN"),
    "128": ("DNK", "Denmark", "DNK"),
    "144": ("SWE", "Sweden", "SWE"),
    "964": ("POL", "Poland", "POL"),
    "914": ("ALB", "Albania", "ALB"),
    "512": ("AFG", "Afghanistan", "AFG"),
    "612": ("DZA", "Algeria", "DZA"),
    "614": ("AGO", "Angola", "AGO"),
    "311": ("ATG", "Antigua and Barbuda", "ATG"),
    "911": ("ARM", "Armenia", "ARM"),
    "466": ("ARE", "United Arab Emirates", "ARE"),
    "912": ("AZE", "Azerbaijan", "AZE"),
    "313": ("BHS", "The Bahamas", "BHS"),
    "419": ("BHR", "Bahrain", "BHR"),
    "513": ("BGD", "Bangladesh", "BGD"),
    "316": ("BRB", "Barbados", "BRB"),
    "913": ("BLR", "Belarus", "BLR"),
    "339": ("BLZ", "Belize", "BLZ"),
    "638": ("BEN", "Benin", "BEN"),
    "514": ("BTN", "Bhutan", "BTN"),
    "218": ("BOL", "Bolivia", "BOL"),
    "963": ("BIH", "Bosnia and Herzegovina", "BIH"),
    "616": ("BWA", "Botswana", "BWA"),
    "516": ("BRN", "Brunei Darussalam", "BRN"),
    "918": ("BGR", "Bulgaria", "BGR"),
    "748": ("BFA", "Burkina Faso", "BFA"),
    "618": ("BDI", "Burundi", "BDI"),
    "624": ("CPV", "Cabo Verde", "CPV"),
    "522": ("KHM", "Cambodia", "KHM"),
    "622": ("CMR", "Cameroon", "CMR"),
    "626": ("CAF", "Central African Republic", "CAF"),
    "628": ("TCD", "Chad", "TCD"),
    "233": ("COL", "Colombia", "COL"),
    "632": ("COM", "Comoros", "COM"),
    "634": ("COG", "Republic of Congo", "COG"),
    "238": ("CRI", "Costa Rica", "CRI"),
    "662": ("CIV", "Côte d'Ivoire", "CIV"),
    "960": ("HRV", "Croatia", "HRV"),
    "423": ("CYP", "Cyprus", "CYP"),
    "935": ("CZE", "Czech Republic", "CZE"),
    "636": ("COD", "Democratic Republic of the Congo", "COD"),
    "611": ("DJI", "Djibouti", "DJI"),
    "321": ("DMA", "Dominica", "DMA"),
    "243": ("DOM", "Dominican Republic", "DOM"),
    "248": ("ECU", "Ecuador", "ECU"),
    "469": ("EGY", "Egypt", "EGY"),
    "253": ("SLV", "El Salvador", "SLV"),
    "642": ("GNQ", "Equatorial Guinea", "GNQ"),
    "643": ("ERI", "Eritrea", "ERI"),
    "939": ("EST", "Estonia", "EST"),
    "644": ("ETH", "Ethiopia", "ETH"),
    "819": ("FJI", "Fiji", "FJI"),
    "646": ("GAB", "Gabon", "GAB"),
    "648": ("GMB", "The Gambia", "GMB"),
    "915": ("GEO", "Georgia", "GEO"),
    "652": ("GHA", "Ghana", "GHA"),
    "174": ("GRC", "Greece", "GRC"),
    "328": ("GRD", "Grenada", "GRD"),
    "258": ("GTM", "Guatemala", "GTM"),
    "656": ("GIN", "Guinea", "GIN"),
    "654": ("GNB", "Guinea-Bissau", "GNB"),
    "336": ("GUY", "Guyana", "GUY"),
    "263": ("HTI", "Haiti", "HTI"),
    "268": ("HND", "Honduras", "HND"),
    "532": ("HKG", "Hong Kong SAR", "HKG"),
    "944": ("HUN", "Hungary", "HUN"),
    "176": ("ISL", "Iceland", "ISL"),
    "429": ("IRN", "Islamic Republic of Iran", "IRN"),
    "433": ("IRQ", "Iraq", "IRQ"),
    "343": ("JAM", "Jamaica", "JAM"),
    "439": ("JOR", "Jordan", "JOR"),
    "916": ("KAZ", "Kazakhstan", "KAZ"),
    "664": ("KEN", "Kenya", "KEN"),
    "826": ("KIR", "Kiribati", "KIR"),
    "967": ("UVK", "Kosovo", "XKX"),
    "443": ("KWT", "Kuwait", "KWT"),
    "917": ("KGZ", "Kyrgyz Republic", "KGZ"),
    "544": ("LAO", "Lao P.D.R.", "LAO"),
    "941": ("LVA", "Latvia", "LVA"),
    "446": ("LBN", "Lebanon", "LBN"),
    "666": ("LSO", "Lesotho", "LSO"),
    "668": ("LBR", "Liberia", "LBR"),
    "672": ("LBY", "Libya", "LBY"),
    "946": ("LTU", "Lithuania", "LTU"),
    "137": ("LUX", "Luxembourg", "LUX"),
    "962": ("MKD", "FYR Macedonia", "MKD"),
    "674": ("MDG", "Madagascar", "MDG"),
    "676": ("MWI", "Malawi", "MWI"),
    "556": ("MDV", "Maldives", "MDV"),
    "678": ("MLI", "Mali", "MLI"),
    "181": ("MLT", "Malta", "MLT"),
    "867": ("MHL", "Marshall Islands", "MHL"),
    "682": ("MRT", "Mauritania", "MRT"),
    "684": ("MUS", "Mauritius", "MUS"),
    "868": ("FSM", "Micronesia", "FSM"),
    "921": ("MDA", "Moldova", "MDA"),
    "948": ("MNG", "Mongolia", "MNG"),
    "943": ("MNE", "Montenegro", "MNE"),
    "686": ("MAR", "Morocco", "MAR"),
    "688": ("MOZ", "Mozambique", "MOZ"),
    "518": ("MMR", "Myanmar", "MMR"),
    "728": ("NAM", "Namibia", "NAM"),
    "558": ("NPL", "Nepal", "NPL"),
    "278": ("NIC", "Nicaragua", "NIC"),
    "692": ("NER", "Niger", "NER"),
    "694": ("NGA", "Nigeria", "NGA"),
    "449": ("OMN", "Oman", "OMN"),
    "564": ("PAK", "Pakistan", "PAK"),
    "565": ("PLW", "Palau", "PLW"),
    "283": ("PAN", "Panama", "PAN"),
    "853": ("PNG", "Papua New Guinea", "PNG"),
    "288": ("PRY", "Paraguay", "PRY"),
    "293": ("PER", "Peru", "PER"),
    "182": ("PRT", "Portugal", "PRT"),
    "453": ("QAT", "Qatar", "QAT"),
    "968": ("ROU", "Romania", "ROU"),
    "714": ("RWA", "Rwanda", "RWA"),
    "361": ("KNA", "St. Kitts and Nevis", "KNA"),
    "362": ("LCA", "St. Lucia", "LCA"),
    "364": ("VCT", "St. Vincent and the Grenadines", "VCT"),
    "862": ("WSM", "Samoa", "WSM"),
    "135": ("SMR", "San Marino", "SMR"),
    "716": ("STP", "São Tomé and Príncipe", "STP"),
    "722": ("SEN", "Senegal", "SEN"),
    "942": ("SRB", "Serbia", "SRB"),
    "718": ("SYC", "Seychelles", "SYC"),
    "724": ("SLE", "Sierra Leone", "SLE"),
    "936": ("SVK", "Slovak Republic", "SVK"),
    "961": ("SVN", "Slovenia", "SVN"),
    "813": ("SLB", "Solomon Islands", "SLB"),
    "733": ("SSD", "South Sudan", "SSD"),
    "524": ("LKA", "Sri Lanka", "LKA"),
    "732": ("SDN", "Sudan", "SDN"),
    "366": ("SUR", "Suriname", "SUR"),
    "734": ("SWZ", "Swaziland", "SWZ"),
    "463": ("SYR", "Syria", "SYR"),
    "923": ("TJK", "Tajikistan", "TJK"),
    "738": ("TZA", "Tanzania", "TZA"),
    "537": ("TLS", "Timor-Leste", "TLS"),
    "742": ("TGO", "Togo", "TGO"),
    "866": ("TON", "Tonga", "TON"),
    "369": ("TTO", "Trinidad and Tobago", "TTO"),
    "744": ("TUN", "Tunisia", "TUN"),
    "925": ("TKM", "Turkmenistan", "TKM"),
    "869": ("TUV", "Tuvalu", "TUV"),
    "746": ("UGA", "Uganda", "UGA"),
    "926": ("UKR", "Ukraine", "UKR"),
    "298": ("URY", "Uruguay", "URY"),
    "927": ("UZB", "Uzbekistan", "UZB"),
    "846": ("VUT", "Vanuatu", "VUT"),
    "299": ("VEN", "Venezuela", "VEN"),
    "474": ("YEM", "Yemen", "YEM"),
    "754": ("ZMB", "Zambia", "ZMB"),
    "698": ("ZWE", "Zimbabwe", "ZWE"),
}

IMF_COUNTRY_MAPPINGS = {
    code: ImfCountry(*row) for code, row in _IMF_COUNTRY_ROWS.items()
}

# industry -> WEO subject code -> description
IMF_INDICATOR_MAPPINGS = {
    "finance": {
        "NGDP_RPCH": "GDP Growth Rate",
        "PCPIPCH": "Inflation Rate",
        "GGR_NGDP": "Government Revenue (% of GDP)",
        "GGXCNL_NGDP": "Government Net Lending/Borrowing (% of GDP)",
        "GGXWDG_NGDP": "Government Gross Debt (% of GDP)",
        "GGXWDN_NGDP": "Government Net Debt (% of GDP)",
        "GGSB_NPGDP": "Government Structural Balance (% of GDP)",
        "BCA_NGDPD": "Current Account Balance (% of GDP)",
        "FLIBOR6": "Six-month LIBOR Rate",
        "NID_NGDP": "Total Investment (% of GDP)",
        "NGSD_NGDP": "Gross National Savings (% of GDP)",
    },
    "context": {
        "NGDP_RPCH": "GDP Growth Rate",
        "NGDPDPC": "GDP per Capita (USD)",
        "NGDPPC": "GDP per Capita (National Currency)",
        "PPPPC": "GDP per Capita (PPP)",
        "NGDPRPC": "GDP per Capita (Constant Prices)",
        "NGDPRPPPPC": "GDP per Capita (Constant PPP)",
        "PCPIPCH": "Inflation Rate",
        "PCPI": "Consumer Price Index",
        "LUR": "Unemployment Rate",
        "LP": "Population",
        "LE": "Employment",
        "NGAP_NPGDP": "Output Gap (% of Potential GDP)",
        "PPPSH": "PPP Share of World GDP",
        "PPPEX": "PPP Exchange Rate",
        "NGDP_D": "GDP Deflator",
    },
    "trade": {
        "TM_RPCH": "Volume of Imports Growth",
        "TX_RPCH": "Volume of Exports Growth",
        "TMG_RPCH": "Volume of Imports of Goods Growth",
        "TXG_RPCH": "Volume of Exports of Goods Growth",
        "BCA": "Current Account Balance (USD)",
        "BCA_NGDPD": "Current Account Balance (% of GDP)",
    },
    "innovation": {
        "NID_NGDP": "Total Investment (% of GDP)",
        "NGSD_NGDP": "Gross National Savings (% of GDP)",
        "NGDP_RPCH": "GDP Growth Rate",
        "PPPPC": "GDP per Capita (PPP)",
        "NGDPRPPPPC": "GDP per Capita (Constant PPP)",
    },
}
