"""Static industry classification of World Bank indicator codes.

The table is ordered: when a code is listed under several industries the
earliest industry wins. Energy precedes infrastructure so electricity
access (EG.ELC.ACCS.ZS) is classified as an energy indicator.
"""

from typing import Dict, List, Optional

GENERAL_INDUSTRY = "general"

INDUSTRY_INDICATORS: Dict[str, Dict[str, List[str]]] = {
    "food": {
        "WB": [
            "AG.LND.AGRI.ZS",
            "AG.PRD.FOOD.XD",
            "AG.YLD.CREL.KG",
            "AG.CON.FERT.ZS",
            "NV.AGR.TOTL.ZS",
            "SL.AGR.EMPL.ZS",
            "TM.VAL.FOOD.ZS.UN",
        ],
    },
    "ict": {
        "WB": [
            "IT.NET.USER.ZS",
            "IT.CEL.SETS.P2",
            "IT.NET.BBND.P2",
            "TX.VAL.ICTG.ZS.UN",
            "TM.VAL.ICTG.ZS.UN",
            "IT.NET.SECR.P6",
        ],
    },
    "energy": {
        "WB": [
            "EG.ELC.ACCS.ZS",
            "EG.ELC.RNEW.ZS",
            "EG.ELC.COAL.ZS",
            "EG.ELC.NGAS.ZS",
            "EG.ELC.NUCL.ZS",
            "EG.ELC.HYRO.ZS",
            "EG.FEC.RNEW.ZS",
            "EG.USE.PCAP.KG.OE",
            "EG.GDP.PUSE.KO.PP",
            "EG.CFT.ACCS.ZS",
            "EG.ELC.LOSS.ZS",
            "EG.IMP.CONS.ZS",
        ],
    },
    "infrastructure": {
        "WB": [
            "IS.ROD.DNST.K2",
            "IS.ROD.PAVE.ZS",
            "IS.RRS.TOTL.KM",
            "IS.AIR.PSGR",
            "EG.ELC.ACCS.ZS",
            "EG.ELC.PROD.KH",
            "SH.H2O.BASW.ZS",
        ],
    },
    "biotech": {
        "WB": [
            "SH.XPD.CHEX.GD.ZS",
            "SH.XPD.CHEX.PC.CD",
            "SP.DYN.LE00.IN",
            "SH.MED.BEDS.ZS",
            "SH.MED.PHYS.ZS",
            "GB.XPD.RSDV.GD.ZS",
            "IP.PAT.RESD",
            "TX.VAL.TECH.CD",
        ],
    },
    "medtech": {
        "WB": [
            "SH.XPD.CHEX.GD.ZS",
            "SH.MED.BEDS.ZS",
            "TX.VAL.TECH.CD",
            "GB.XPD.RSDV.GD.ZS",
            "IP.PAT.RESD",
            "NV.IND.MANF.ZS",
            "TX.VAL.MANF.ZS.UN",
        ],
    },
    "mem": {
        "WB": [
            "TX.VAL.TECH.CD",
            "NV.IND.MANF.ZS",
            "GB.XPD.RSDV.GD.ZS",
            "IP.PAT.RESD",
            "TX.VAL.MANF.ZS.UN",
            "NV.IND.TOTL.ZS",
            "SL.IND.EMPL.ZS",
        ],
    },
    "climate": {
        "WB": [
            "EN.ATM.CO2E.PC",
            "EN.ATM.CO2E.KT",
            "EN.ATM.METH.KT.CE",
            "EN.ATM.NOXE.KT.CE",
            "EN.ATM.PM25.MC.M3",
            "EN.CLC.MDAT.ZS",
            "EN.POP.EL5M.ZS",
            "EN.POP.DNST",
            "EN.FSH.THRD.NO",
            "EN.MAM.THRD.NO",
            "EN.BIR.THRD.NO",
            "AG.LND.FRST.ZS",
        ],
    },
    "context": {
        "WB": [
            "NY.GDP.MKTP.KD.ZG",
            "NY.GDP.PCAP.KD",
            "NY.GDP.PCAP.PP.KD",
            "FP.CPI.TOTL.ZG",
            "NE.TRD.GNFS.ZS",
            "SE.TER.ENRR",
            "SE.TER.ENRR.FE",
            "SE.TER.ENRR.MA",
            "SE.ADT.LITR.ZS",
            "SL.UEM.TOTL.ZS",
            "IC.BUS.EASE.XQ",
            "IC.REG.DURS",
            "IC.REG.COST.PC.ZS",
            "IC.TAX.TOTL.CP.ZS",
            "IQ.CPA.PROP.XQ",
            "IQ.CPA.TRAN.XQ",
            "IQ.CPA.FINS.XQ",
            "IQ.CPA.DEBT.XQ",
            "SI.POV.DDAY",
            "SI.POV.GINI",
            "SP.URB.TOTL.IN.ZS",
            "SP.POP.GROW",
            "SP.POP.65UP.TO.ZS",
        ],
    },
    "innovation": {
        "WB": [
            "GB.XPD.RSDV.GD.ZS",
            "IP.PAT.RESD",
            "IP.PAT.NRES",
            "IP.TMK.RESD",
            "IP.TMK.NRES",
            "IP.IDS.RSCT",
            "IP.IDS.NRCT",
            "IP.JRN.ARTC.SC",
            "TX.VAL.TECH.MF.ZS",
            "SP.POP.SCIE.RD.P6",
            "BX.GSR.ROYL.CD",
            "BM.GSR.ROYL.CD",
        ],
    },
    "finance": {
        "WB": [
            "FS.AST.DOMS.GD.ZS",
            "FS.AST.PRVT.GD.ZS",
            "FD.AST.PRVT.GD.ZS",
            "FR.INR.LEND",
            "FR.INR.DPST",
            "FR.INR.RINR",
            "BX.KLT.DINV.WD.GD.ZS",
            "BX.PEF.TOTL.CD.WD",
            "CM.MKT.LCAP.GD.ZS",
            "CM.MKT.TRAD.GD.ZS",
            "GFDD.DI.14",
            "GFDD.SI.01",
        ],
    },
    "trade": {
        "WB": [
            "NE.EXP.GNFS.ZS",
            "NE.IMP.GNFS.ZS",
            "NE.TRD.GNFS.ZS",
            "BX.GSR.GNFS.CD",
            "BM.GSR.GNFS.CD",
            "BN.CAB.XOKA.GD.ZS",
            "TX.VAL.MANF.ZS.UN",
            "TM.VAL.MANF.ZS.UN",
            "TX.VAL.FUEL.ZS.UN",
            "TM.VAL.FUEL.ZS.UN",
            "TX.VAL.MMTL.ZS.UN",
            "TM.VAL.MMTL.ZS.UN",
        ],
    },
}

INDUSTRIES = tuple(INDUSTRY_INDICATORS)


def get_indicator_industry(code: str, source: str = "WB") -> Optional[str]:
    """Reverse lookup of the first industry listing ``code``.

    Linear scan; used when building the registry, never per ingested row.
    """
    for industry, sources in INDUSTRY_INDICATORS.items():
        if code in sources.get(source, ()):
            return industry
    return None


def all_indicators(source: str = "WB") -> List[str]:
    """Every code listed for ``source``, first-seen order, no duplicates."""
    seen = {}
    for sources in INDUSTRY_INDICATORS.values():
        for code in sources.get(source, ()):
            seen.setdefault(code, None)
    return list(seen)


def industry_rank(industry: Optional[str]) -> int:
    """Precedence of an industry; unknown labels rank after every known one."""
    try:
        return INDUSTRIES.index(industry)
    except ValueError:
        return len(INDUSTRIES)
