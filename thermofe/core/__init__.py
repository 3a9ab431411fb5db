"""thermofe.core - 要素モデル・基底・構成則の抽象インタフェース定義・戻り値型.

Protocol 階層:
  ElementModelProtocol: 積分点の弱形式係数・ヤコビアン・感度
  BasisProtocol: 形状関数・体積/面積分点
  ElementProtocol: 要素レベルの残差・ヤコビアン・随伴積
  ThermoelasticConstitutiveProtocol: 応力・熱流束・設計変数
"""

from thermofe.core.constitutive import ThermoelasticConstitutiveProtocol
from thermofe.core.element import BasisProtocol, ElementModelProtocol, ElementProtocol
from thermofe.core.results import (
    AdjXptSensProduct,
    DirichletResult,
    FaceNormal,
    FailureStrainSens,
    FieldGradient,
    JacobianAssemblyResult,
    PointQuantity,
    PointQuantitySens,
    VerificationResult,
    WeakIntegrand,
    WeakMatrix,
    WeakMatrixNonzeros,
)

__all__ = [
    "ElementModelProtocol",
    "BasisProtocol",
    "ElementProtocol",
    "ThermoelasticConstitutiveProtocol",
    "WeakIntegrand",
    "WeakMatrix",
    "WeakMatrixNonzeros",
    "AdjXptSensProduct",
    "PointQuantity",
    "PointQuantitySens",
    "FailureStrainSens",
    "FieldGradient",
    "FaceNormal",
    "VerificationResult",
    "DirichletResult",
    "JacobianAssemblyResult",
]
